from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from invite_site.guests.dtos import AttendanceSummaryDTO, GuestRecord, GuestScope, RsvpChoice


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GuestIdentitySubmit(CamelModel):
    """Name and phone as typed by the guest. Validation happens in the service."""

    name: str = ""
    phone: str = ""

    @field_validator("name", "phone", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> str:
        return "" if value is None else str(value)


class GuestResponse(CamelModel):
    id: str
    name: str
    phone: str
    rsvp: RsvpChoice | None
    plus_ones: int
    scope: GuestScope
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: GuestRecord) -> "GuestResponse":
        return cls(
            id=record.id,
            name=record.name,
            phone=record.phone,
            rsvp=record.rsvp,
            plus_ones=record.plus_ones,
            scope=record.scope,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class GuestEnvelope(BaseModel):
    guest: GuestResponse | None


class GuestListResponse(BaseModel):
    guests: list[GuestResponse]


class OkResponse(BaseModel):
    ok: bool = True


class AttendanceSummaryResponse(CamelModel):
    scope: GuestScope
    total_guests: int
    total_rsvps: int
    yes: int
    no: int
    maybe: int
    total_people: int
    yes_percent: int = Field(ge=0, le=100)
    no_percent: int = Field(ge=0, le=100)
    maybe_percent: int = Field(ge=0, le=100)

    @classmethod
    def from_dto(cls, summary: AttendanceSummaryDTO) -> "AttendanceSummaryResponse":
        return cls(
            scope=summary.scope,
            total_guests=summary.total_guests,
            total_rsvps=summary.total_rsvps,
            yes=summary.yes,
            no=summary.no,
            maybe=summary.maybe,
            total_people=summary.total_people,
            yes_percent=summary.yes_percent,
            no_percent=summary.no_percent,
            maybe_percent=summary.maybe_percent,
        )
