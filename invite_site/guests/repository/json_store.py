"""Guest store backed by a single JSON document on disk."""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from invite_site.guests.dtos import GuestRecord, transient_id, transient_position
from invite_site.guests.errors import BackendError
from invite_site.guests.repository.base import GuestStore

logger = logging.getLogger(__name__)

Document = dict[str, Any]


class JsonFileGuestStore(GuestStore):
    """
    Keeps ``{"guests": [...]}`` in one file and rewrites the whole file on
    every write. A missing or unreadable document is replaced by the seed
    document, or by an empty list when there is no seed.

    Every write to the file, including that first initialization from a read,
    holds the store's write lock. A read that finds the document missing
    re-checks under the lock, so it never overwrites a write that got there
    first.
    """

    def __init__(self, path: Path | str, seed_path: Path | str | None = None) -> None:
        self.path = Path(path)
        self.seed_path = Path(seed_path) if seed_path else None
        self._write_lock = asyncio.Lock()

    async def read_all(self) -> list[GuestRecord]:
        document = await asyncio.to_thread(self._read_document)
        if document is None:
            async with self._write_lock:
                document = await asyncio.to_thread(self._initialize)
        return self._records(document)

    async def insert(self, record: GuestRecord) -> None:
        def _insert(document: Document) -> None:
            document["guests"].append(record.to_document())

        await self._rewrite(_insert)
        logger.info(f"Inserted guest {record.id}")

    async def update(self, record: GuestRecord) -> None:
        def _update(document: Document) -> None:
            guests = document["guests"]
            for index, item in enumerate(guests):
                if item.get("id") == record.id:
                    guests[index] = record.to_document()
                    return
            raise BackendError(f"Guest {record.id} not found in {self.path}")

        await self._rewrite(_update)
        logger.debug(f"Updated guest {record.id}")

    async def delete_by_id(self, guest_id: str) -> bool:
        def _delete(document: Document) -> bool:
            before = len(document["guests"])
            document["guests"] = [item for item in document["guests"] if item.get("id") != guest_id]
            return len(document["guests"]) != before

        deleted = await self._rewrite(_delete)
        if deleted:
            logger.info(f"Deleted guest {guest_id}")
        return deleted

    async def confirm_identity(self, record: GuestRecord, durable_id: str) -> GuestRecord:
        position = transient_position(record.id)
        if position is None:
            return record

        def _confirm(document: Document) -> None:
            guests = document["guests"]
            if position >= len(guests) or guests[position].get("id") or (
                GuestRecord.from_document(guests[position], record.id).phone != record.phone
            ):
                raise BackendError(f"Stale guest handle {record.id}; re-read the guest list")
            guests[position]["id"] = durable_id

        await self._rewrite(_confirm)
        logger.info(f"Assigned id {durable_id} to guest at position {position}")
        return record.with_id(durable_id)

    async def _rewrite(self, mutate):
        """Load, mutate and write back the document. ``mutate`` returning False skips the write."""

        def _apply():
            document = self._read_document()
            if document is None:
                document = self._initial_document()
            result = mutate(document)
            if result is not False:
                self._write_document(document)
            return result

        async with self._write_lock:
            return await asyncio.to_thread(_apply)

    # -------------------------------------------------------------------------
    # Blocking helpers, always run in a worker thread
    # -------------------------------------------------------------------------

    def _records(self, document: Document) -> list[GuestRecord]:
        return [
            GuestRecord.from_document(item, transient_id(position))
            for position, item in enumerate(document["guests"])
        ]

    def _read_document(self) -> Document | None:
        """Parse the document, or None when it is missing or unreadable."""
        try:
            parsed = json.loads(self.path.read_text(encoding="utf-8"))
        except (FileNotFoundError, json.JSONDecodeError, UnicodeDecodeError):
            return None
        except OSError as e:
            raise BackendError(f"Could not read {self.path}: {e}") from e

        if not isinstance(parsed, dict):
            return None
        guests = parsed.get("guests")
        if not isinstance(guests, list):
            return {"guests": []}
        parsed["guests"] = [item for item in guests if isinstance(item, dict)]
        for item in parsed["guests"]:
            item.setdefault("scope", "all")
        return parsed

    def _initial_document(self) -> Document:
        document: Document = {"guests": []}
        if self.seed_path is not None:
            try:
                seed = json.loads(self.seed_path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError, UnicodeDecodeError):
                logger.info(f"No usable seed at {self.seed_path}; starting with an empty guest list")
            else:
                if isinstance(seed, dict) and isinstance(seed.get("guests"), list):
                    document = {"guests": [item for item in seed["guests"] if isinstance(item, dict)]}
        for item in document["guests"]:
            item.setdefault("scope", "all")
        return document

    def _initialize(self) -> Document:
        document = self._read_document()
        if document is not None:
            return document

        document = self._initial_document()
        self._write_document(document)
        logger.info(f"Initialized {self.path} with {len(document['guests'])} guest(s)")
        return document

    def _write_document(self, document: Document) -> None:
        temporary = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # Unique name per write so no two writers ever share a temp file
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                temporary = Path(handle.name)
                json.dump(document, handle, indent=2)
            os.replace(temporary, self.path)
        except OSError as e:
            if temporary is not None:
                temporary.unlink(missing_ok=True)
            raise BackendError(f"Could not write {self.path}: {e}") from e
