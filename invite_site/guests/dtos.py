from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

from invite_site.guests.normalization import clamp_plus_ones, normalize_phone

# Placeholder ids for stored guests that have no durable id yet. They encode a
# position in the store and are only valid until the next write.
TRANSIENT_ID_PREFIX = "row:"

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class RsvpChoice(str, Enum):
    YES = "yes"
    NO = "no"
    MAYBE = "maybe"


class GuestScope(str, Enum):
    ALL = "all"
    WEDDING = "wedding"


def utc_now() -> datetime:
    return datetime.now(UTC)


def format_timestamp(value: datetime) -> str:
    return value.astimezone(UTC).isoformat(timespec="microseconds").replace("+00:00", "Z")


def parse_timestamp(value: Any) -> datetime:
    """Parse a stored ISO timestamp. Blank or unreadable values sort as the epoch."""
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value or "").strip()
        if not text:
            return EPOCH
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def transient_id(position: int) -> str:
    return f"{TRANSIENT_ID_PREFIX}{position}"


def transient_position(guest_id: str) -> int | None:
    if not guest_id.startswith(TRANSIENT_ID_PREFIX):
        return None
    try:
        return int(guest_id[len(TRANSIENT_ID_PREFIX):])
    except ValueError:
        return None


def parse_rsvp(value: Any) -> RsvpChoice | None:
    """Lenient parse: anything that is not yes/no/maybe means "no response"."""
    if isinstance(value, RsvpChoice):
        return value
    try:
        return RsvpChoice(str(value or "").strip().lower())
    except ValueError:
        return None


def parse_scope(value: Any) -> GuestScope:
    if isinstance(value, GuestScope):
        return value
    return GuestScope.WEDDING if str(value or "").strip().lower() == "wedding" else GuestScope.ALL


@dataclass
class GuestRecord:
    """A single guest and their RSVP, as held by a guest store."""

    id: str
    name: str
    phone: str
    rsvp: RsvpChoice | None = None
    plus_ones: int = 0
    scope: GuestScope = GuestScope.ALL
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @property
    def has_durable_id(self) -> bool:
        return bool(self.id) and not self.id.startswith(TRANSIENT_ID_PREFIX)

    def touch(self) -> None:
        """Move updated_at forward, strictly, even if the clock has not."""
        now = utc_now()
        if now <= self.updated_at:
            now = self.updated_at + timedelta(microseconds=1)
        self.updated_at = now

    def with_id(self, guest_id: str) -> "GuestRecord":
        return replace(self, id=guest_id)

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "rsvp": self.rsvp.value if self.rsvp else None,
            "plusOnes": self.plus_ones,
            "scope": self.scope.value,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }

    @classmethod
    def from_document(cls, data: dict[str, Any], fallback_id: str) -> "GuestRecord":
        """
        Build a record from a stored mapping.
        Legacy entries without a scope default to "all"; entries without an
        id get ``fallback_id``.
        """
        guest_id = str(data.get("id") or "").strip()
        return cls(
            id=guest_id or fallback_id,
            name=str(data.get("name") or "").strip(),
            phone=normalize_phone(str(data.get("phone") or "")),
            rsvp=parse_rsvp(data.get("rsvp")),
            plus_ones=clamp_plus_ones(data.get("plusOnes") or 0),
            scope=parse_scope(data.get("scope")),
            created_at=parse_timestamp(data.get("createdAt")),
            updated_at=parse_timestamp(data.get("updatedAt")),
        )


@dataclass(frozen=True)
class AttendanceSummaryDTO:
    """Attendance figures for one scope."""

    scope: GuestScope
    total_guests: int
    total_rsvps: int
    yes: int
    no: int
    maybe: int
    total_people: int

    @staticmethod
    def _percent(value: int, total: int) -> int:
        return round(value / total * 100) if total > 0 else 0

    @property
    def yes_percent(self) -> int:
        return self._percent(self.yes, self.total_rsvps)

    @property
    def no_percent(self) -> int:
        return self._percent(self.no, self.total_rsvps)

    @property
    def maybe_percent(self) -> int:
        return self._percent(self.maybe, self.total_rsvps)

    @classmethod
    def from_guests(cls, scope: GuestScope, guests: list[GuestRecord]) -> "AttendanceSummaryDTO":
        scoped = [guest for guest in guests if guest.scope == scope]
        attending = [guest for guest in scoped if guest.rsvp == RsvpChoice.YES]
        return cls(
            scope=scope,
            total_guests=len(scoped),
            total_rsvps=sum(1 for guest in scoped if guest.rsvp is not None),
            yes=len(attending),
            no=sum(1 for guest in scoped if guest.rsvp == RsvpChoice.NO),
            maybe=sum(1 for guest in scoped if guest.rsvp == RsvpChoice.MAYBE),
            total_people=sum(1 + guest.plus_ones for guest in attending),
        )
