from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from invite_site.guests.dtos import GuestScope
from invite_site.guests.schemas import (
    AttendanceSummaryResponse,
    GuestEnvelope,
    GuestIdentitySubmit,
    GuestListResponse,
    GuestResponse,
    OkResponse,
)
from invite_site.guests.service import GuestService, get_guest_service
from invite_site.guests.urls import ADMIN_GUEST_URL, ADMIN_GUESTS_URL, ADMIN_SUMMARY_URL

router = APIRouter()


class AdminGuestSubmit(GuestIdentitySubmit):
    """Admin edit form. A missing or unknown rsvp clears the guest's response."""

    rsvp: Any = None
    plus_ones: Any = 0
    scope: Any = "all"


class SummaryResponse(BaseModel):
    all: AttendanceSummaryResponse
    wedding: AttendanceSummaryResponse


@router.get(ADMIN_GUESTS_URL, response_model=GuestListResponse)
async def list_guests(
    scope: str | None = None,
    rsvp: str | None = None,
    search: str | None = None,
    service: GuestService = Depends(get_guest_service),
) -> GuestListResponse:
    """
    List guests, most recently updated first.
    Optional filters: ``scope`` (all/wedding), ``rsvp`` (yes/no/maybe/none), ``search``.
    """
    guests = await service.list_all(scope=scope, rsvp=rsvp, search=search)
    return GuestListResponse(guests=[GuestResponse.from_record(guest) for guest in guests])


@router.post(ADMIN_GUESTS_URL, response_model=GuestEnvelope)
async def add_or_update_guest(
    guest_data: AdminGuestSubmit,
    service: GuestService = Depends(get_guest_service),
) -> GuestEnvelope:
    guest = await service.admin_upsert(
        name=guest_data.name,
        phone=guest_data.phone,
        rsvp=guest_data.rsvp,
        plus_ones=guest_data.plus_ones,
        scope=guest_data.scope,
    )
    return GuestEnvelope(guest=GuestResponse.from_record(guest))


@router.get(ADMIN_SUMMARY_URL, response_model=SummaryResponse)
async def attendance_summary(
    service: GuestService = Depends(get_guest_service),
) -> SummaryResponse:
    """Attendance figures for the whole celebration and for the wedding alone."""
    return SummaryResponse(
        all=AttendanceSummaryResponse.from_dto(await service.summarize(GuestScope.ALL)),
        wedding=AttendanceSummaryResponse.from_dto(await service.summarize(GuestScope.WEDDING)),
    )


@router.delete(ADMIN_GUEST_URL, response_model=OkResponse)
async def delete_guest(
    guest_id: str,
    service: GuestService = Depends(get_guest_service),
) -> OkResponse:
    if not await service.delete_by_id(guest_id):
        raise HTTPException(status_code=404, detail="Guest not found")
    return OkResponse()
