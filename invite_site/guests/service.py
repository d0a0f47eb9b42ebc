"""Guest list operations used by the public RSVP pages and the admin dashboard."""

import logging
from functools import lru_cache
from typing import Any

from invite_site.config.settings import settings
from invite_site.guests.dtos import (
    AttendanceSummaryDTO,
    GuestRecord,
    GuestScope,
    RsvpChoice,
    parse_rsvp,
    parse_scope,
    utc_now,
)
from invite_site.guests.errors import ValidationError
from invite_site.guests.normalization import (
    clamp_plus_ones,
    create_guest_id,
    find_match,
    normalize_name,
    normalize_phone,
)
from invite_site.guests.repository import GuestStore, build_guest_store
from invite_site.guests.serializer import WriteSerializer

logger = logging.getLogger(__name__)

NO_RESPONSE_FILTER = "none"


def _validate_identity(name: str | None, phone: str | None) -> tuple[str, str]:
    """Return (trimmed name, canonical phone) or raise ValidationError."""
    normalized_phone = normalize_phone(phone)
    if not normalized_phone:
        raise ValidationError("Invalid phone number")
    trimmed_name = (name or "").strip()
    if not trimmed_name:
        raise ValidationError("Name is required")
    return trimmed_name, normalized_phone


def _plus_ones_for(rsvp: RsvpChoice | None, plus_ones: Any) -> int:
    return 0 if rsvp == RsvpChoice.NO else clamp_plus_ones(plus_ones)


class GuestService:
    """
    Every mutation goes through the write serializer and re-reads the store
    before changing anything. Reads go straight to the store.
    """

    def __init__(self, store: GuestStore, serializer: WriteSerializer | None = None) -> None:
        self.store = store
        self.serializer = serializer or WriteSerializer()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def lookup_by_phone(self, phone: str) -> GuestRecord | None:
        normalized_phone = normalize_phone(phone)
        if not normalized_phone:
            return None

        guest = await self.store.find_by_phone(normalized_phone)
        if guest is None:
            guest = find_match(await self.store.read_all(), normalized_phone)
        if guest is not None and not guest.has_durable_id:
            guest = await self.serializer.submit(self._promote_match, normalized_phone)
        return guest

    async def list_all(
        self,
        scope: str | None = None,
        rsvp: str | None = None,
        search: str | None = None,
    ) -> list[GuestRecord]:
        """All guests, most recently updated first, optionally filtered."""
        guests = await self.store.read_all()
        if any(not guest.has_durable_id for guest in guests):
            guests = await self.serializer.submit(self._promote_all)

        if scope:
            wanted_scope = scope.strip().lower()
            if wanted_scope not in {item.value for item in GuestScope}:
                raise ValidationError(f"Invalid scope filter: {scope}")
            guests = [guest for guest in guests if guest.scope.value == wanted_scope]

        if rsvp:
            wanted_rsvp = rsvp.strip().lower()
            if wanted_rsvp == NO_RESPONSE_FILTER:
                guests = [guest for guest in guests if guest.rsvp is None]
            else:
                choice = parse_rsvp(wanted_rsvp)
                if choice is None:
                    raise ValidationError(f"Invalid RSVP filter: {rsvp}")
                guests = [guest for guest in guests if guest.rsvp == choice]

        if search and search.strip():
            needle = normalize_name(search)
            guests = [
                guest
                for guest in guests
                if needle in normalize_name(guest.name) or needle in guest.phone
            ]

        return sorted(guests, key=lambda guest: guest.updated_at, reverse=True)

    async def summarize(self, scope: GuestScope | str) -> AttendanceSummaryDTO:
        scope = parse_scope(scope)
        return AttendanceSummaryDTO.from_guests(scope, await self.list_all())

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def upsert_profile(self, name: str, phone: str) -> GuestRecord:
        """Create a guest with no RSVP yet, or refresh the name of the matching one."""
        trimmed_name, normalized_phone = _validate_identity(name, phone)
        return await self.serializer.submit(self._upsert_profile, trimmed_name, normalized_phone)

    async def save_rsvp(
        self,
        name: str,
        phone: str,
        rsvp: RsvpChoice | str,
        plus_ones: Any,
        scope: GuestScope | str = GuestScope.ALL,
    ) -> GuestRecord:
        trimmed_name, normalized_phone = _validate_identity(name, phone)
        choice = parse_rsvp(rsvp)
        if choice is None:
            raise ValidationError("Invalid RSVP choice")
        return await self.serializer.submit(
            self._save_response,
            trimmed_name,
            normalized_phone,
            choice,
            _plus_ones_for(choice, plus_ones),
            parse_scope(scope),
        )

    async def admin_upsert(
        self,
        name: str,
        phone: str,
        rsvp: RsvpChoice | str | None,
        plus_ones: Any,
        scope: GuestScope | str = GuestScope.ALL,
    ) -> GuestRecord:
        """Like save_rsvp, but an absent or unknown rsvp clears the response."""
        trimmed_name, normalized_phone = _validate_identity(name, phone)
        choice = parse_rsvp(rsvp)
        return await self.serializer.submit(
            self._save_response,
            trimmed_name,
            normalized_phone,
            choice,
            _plus_ones_for(choice, plus_ones),
            parse_scope(scope),
        )

    async def delete_by_id(self, guest_id: str) -> bool:
        guest_id = (guest_id or "").strip()
        if not guest_id:
            return False
        return await self.serializer.submit(self._delete, guest_id)

    # -------------------------------------------------------------------------
    # Queued units of work
    # -------------------------------------------------------------------------

    async def _promote(self, guest: GuestRecord, guests: list[GuestRecord]) -> GuestRecord:
        if guest.has_durable_id:
            return guest
        durable_id = create_guest_id(item.id for item in guests)
        return await self.store.confirm_identity(guest, durable_id)

    async def _promote_all(self) -> list[GuestRecord]:
        guests = await self.store.read_all()
        promoted = []
        for guest in guests:
            promoted.append(await self._promote(guest, guests + promoted))
        return promoted

    async def _promote_match(self, phone: str) -> GuestRecord | None:
        guests = await self.store.read_all()
        guest = find_match(guests, phone)
        if guest is None:
            return None
        return await self._promote(guest, guests)

    async def _upsert_profile(self, name: str, phone: str) -> GuestRecord:
        guests = await self.store.read_all()
        guest = find_match(guests, phone, name)
        if guest is not None:
            guest = await self._promote(guest, guests)
            guest.name = name
            guest.touch()
            await self.store.update(guest)
            logger.info(f"Updated profile of guest {guest.id}")
            return guest

        now = utc_now()
        guest = GuestRecord(
            id=create_guest_id(item.id for item in guests),
            name=name,
            phone=phone,
            created_at=now,
            updated_at=now,
        )
        await self.store.insert(guest)
        logger.info(f"Created guest {guest.id} from profile")
        return guest

    async def _save_response(
        self,
        name: str,
        phone: str,
        rsvp: RsvpChoice | None,
        plus_ones: int,
        scope: GuestScope,
    ) -> GuestRecord:
        guests = await self.store.read_all()
        guest = find_match(guests, phone, name)
        if guest is None:
            now = utc_now()
            guest = GuestRecord(
                id=create_guest_id(item.id for item in guests),
                name=name,
                phone=phone,
                rsvp=rsvp,
                plus_ones=plus_ones,
                scope=scope,
                created_at=now,
                updated_at=now,
            )
            await self.store.insert(guest)
            logger.info(f"Created guest {guest.id} with RSVP {rsvp.value if rsvp else None}")
            return guest

        guest = await self._promote(guest, guests)
        guest.name = name
        guest.rsvp = rsvp
        guest.plus_ones = plus_ones
        guest.scope = scope
        guest.touch()
        await self.store.update(guest)
        logger.info(f"Guest {guest.id} responded {rsvp.value if rsvp else None} (+{plus_ones}, {scope.value})")
        return guest

    async def _delete(self, guest_id: str) -> bool:
        # Transient ids are positions from an earlier read; they never match a stored id
        deleted = await self.store.delete_by_id(guest_id)
        if not deleted:
            logger.info(f"Delete requested for unknown guest {guest_id}")
        return deleted


@lru_cache
def get_guest_service() -> GuestService:
    """Process-wide service, and with it the one write queue."""
    return GuestService(store=build_guest_store(settings))
