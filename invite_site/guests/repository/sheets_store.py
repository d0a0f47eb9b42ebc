"""Guest store backed by one tab of a spreadsheet: a header row, then one row per guest."""

import asyncio
import logging
from collections.abc import Sequence

from invite_site.guests.dtos import GuestRecord, transient_id, transient_position
from invite_site.guests.errors import BackendError
from invite_site.guests.repository.base import GuestStore
from invite_site.guests.repository.sheets_client import SheetsClient

logger = logging.getLogger(__name__)

HEADERS = ("id", "name", "phone", "rsvp", "plusOnes", "scope", "createdAt", "updatedAt")
_HEADER_KEYS = {header.lower(): header for header in HEADERS}

Rows = list[list[str]]


def _column_map(header: Sequence[str]) -> dict[str, int]:
    """Case-insensitive column name -> index, first occurrence wins."""
    columns: dict[str, int] = {}
    for index, name in enumerate(header):
        key = name.strip().lower()
        if key in _HEADER_KEYS and key not in columns:
            columns[key] = index
    return columns


def _is_blank(row: Sequence[str]) -> bool:
    return not any(cell.strip() for cell in row)


def _cell(row: Sequence[str], columns: dict[str, int], key: str) -> str:
    index = columns.get(key.lower())
    if index is None or index >= len(row):
        return ""
    return row[index]


class SheetsGuestStore(GuestStore):
    """
    Row-per-guest storage on top of a SheetsClient.

    Rows without an id are read with a transient ``row:<n>`` id. Row numbers
    move whenever a row above is deleted, so a transient id is only good until
    the next write; ``confirm_identity`` turns it into a stored id.
    """

    def __init__(self, client: SheetsClient) -> None:
        self.client = client
        # Reads may need a repair too, and they do not go through the write queue
        self._repair_lock = asyncio.Lock()

    # -------------------------------------------------------------------------
    # Schema
    # -------------------------------------------------------------------------

    async def ensure_schema(self) -> bool:
        """Make sure the header row holds every expected column. True if it had to be repaired."""
        repaired, _ = await self._checked_rows()
        return repaired

    async def _checked_rows(self) -> tuple[bool, Rows]:
        rows = await self.client.read_rows()
        if self._header_ok(rows):
            return False, rows

        async with self._repair_lock:
            # Another caller may have repaired the header while we waited
            rows = await self.client.read_rows()
            if self._header_ok(rows):
                return False, rows
            await self._repair_header(rows)
            rows = await self.client.read_rows()
        if not self._header_ok(rows):
            raise BackendError("Guest sheet header is still incomplete after repair")
        return True, rows

    @staticmethod
    def _header_ok(rows: Rows) -> bool:
        return bool(rows) and len(_column_map(rows[0])) == len(HEADERS)

    async def _repair_header(self, rows: Rows) -> None:
        if not rows:
            logger.warning("Guest sheet is empty; writing header row")
            await self.client.append_row(HEADERS)
            return

        header = rows[0]
        if _is_blank(header):
            logger.warning("Guest sheet header row is blank; writing header row")
            await self.client.update_row(1, HEADERS)
            return

        columns = _column_map(header)
        if not columns:
            # The first row is data, not a header
            logger.warning("Guest sheet has no header row; inserting one above the data")
            await self.client.insert_row(1, HEADERS)
            return

        missing = [name for key, name in _HEADER_KEYS.items() if key not in columns]
        logger.warning(f"Guest sheet header is missing {missing}; extending it")
        await self.client.update_row(1, [*header, *missing])

    # -------------------------------------------------------------------------
    # Row mapping
    # -------------------------------------------------------------------------

    @staticmethod
    def _to_record(row: Sequence[str], columns: dict[str, int], row_number: int) -> GuestRecord:
        data = {header: _cell(row, columns, header) for header in HEADERS}
        return GuestRecord.from_document(data, transient_id(row_number))

    @staticmethod
    def _to_row(
        record: GuestRecord,
        header: Sequence[str],
        existing: Sequence[str] = (),
    ) -> list[str]:
        document = record.to_document()
        values = list(existing) + [""] * max(0, len(header) - len(existing))
        for key, index in _column_map(header).items():
            value = document[_HEADER_KEYS[key]]
            values[index] = "" if value is None else str(value)
        return values

    @staticmethod
    def _find_row(rows: Rows, guest_id: str) -> int | None:
        columns = _column_map(rows[0])
        for row_number, row in enumerate(rows[1:], start=2):
            if _cell(row, columns, "id").strip() == guest_id:
                return row_number
        return None

    # -------------------------------------------------------------------------
    # GuestStore
    # -------------------------------------------------------------------------

    async def read_all(self) -> list[GuestRecord]:
        _, rows = await self._checked_rows()
        columns = _column_map(rows[0])
        records = []
        for row_number, row in enumerate(rows[1:], start=2):
            if _is_blank(row):
                continue
            if self._header_ok([row]):
                logger.warning(f"Skipping repeated header in sheet row {row_number}")
                continue
            records.append(self._to_record(row, columns, row_number))
        return records

    async def insert(self, record: GuestRecord) -> None:
        _, rows = await self._checked_rows()
        await self.client.append_row(self._to_row(record, rows[0]))
        logger.info(f"Appended guest {record.id}")

    async def update(self, record: GuestRecord) -> None:
        _, rows = await self._checked_rows()
        row_number = self._find_row(rows, record.id) if record.has_durable_id else None
        if row_number is None:
            raise BackendError(f"Guest {record.id} not found in sheet")
        existing = rows[row_number - 1]
        await self.client.update_row(row_number, self._to_row(record, rows[0], existing))
        logger.debug(f"Updated guest {record.id} in row {row_number}")

    async def delete_by_id(self, guest_id: str) -> bool:
        _, rows = await self._checked_rows()
        row_number = self._find_row(rows, guest_id)
        if row_number is None:
            return False
        await self.client.delete_row(row_number)
        logger.info(f"Deleted guest {guest_id} from row {row_number}")
        return True

    async def confirm_identity(self, record: GuestRecord, durable_id: str) -> GuestRecord:
        row_number = transient_position(record.id)
        if row_number is None:
            return record

        _, rows = await self._checked_rows()
        columns = _column_map(rows[0])
        if row_number < 2 or row_number > len(rows):
            raise BackendError(f"Stale guest handle {record.id}; re-read the guest list")
        row = rows[row_number - 1]
        if _cell(row, columns, "id").strip() or self._to_record(row, columns, row_number).phone != record.phone:
            raise BackendError(f"Stale guest handle {record.id}; re-read the guest list")

        promoted = record.with_id(durable_id)
        await self.client.update_row(row_number, self._to_row(promoted, rows[0], row))
        logger.info(f"Assigned id {durable_id} to sheet row {row_number}")
        return promoted
