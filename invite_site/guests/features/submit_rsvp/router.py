from typing import Any

from fastapi import APIRouter, Depends

from invite_site.guests.schemas import GuestEnvelope, GuestIdentitySubmit, GuestResponse
from invite_site.guests.service import GuestService, get_guest_service
from invite_site.guests.urls import RSVP_URL

router = APIRouter()


class RSVPSubmit(GuestIdentitySubmit):
    """RSVP form payload. Values are checked and clamped by the service."""

    rsvp: Any = ""
    plus_ones: Any = 0
    scope: Any = "all"


@router.post(RSVP_URL, response_model=GuestEnvelope)
async def submit_rsvp(
    rsvp_data: RSVPSubmit,
    service: GuestService = Depends(get_guest_service),
) -> GuestEnvelope:
    """
    Record a yes/no/maybe answer and party size.
    Creates the guest if this phone has not been seen before.
    """
    guest = await service.save_rsvp(
        name=rsvp_data.name,
        phone=rsvp_data.phone,
        rsvp=str(rsvp_data.rsvp or "").lower(),
        plus_ones=rsvp_data.plus_ones,
        scope=rsvp_data.scope,
    )
    return GuestEnvelope(guest=GuestResponse.from_record(guest))
