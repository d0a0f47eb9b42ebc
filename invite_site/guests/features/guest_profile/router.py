from fastapi import APIRouter, Depends, HTTPException

from invite_site.guests.schemas import GuestEnvelope, GuestIdentitySubmit, GuestResponse
from invite_site.guests.service import GuestService, get_guest_service
from invite_site.guests.urls import GUEST_URL

router = APIRouter()


@router.get(GUEST_URL, response_model=GuestEnvelope)
async def lookup_guest(
    phone: str = "",
    service: GuestService = Depends(get_guest_service),
) -> GuestEnvelope:
    """
    Find a guest by phone number.
    Returns ``{"guest": null}`` when nobody has used this number yet.
    """
    if not phone:
        raise HTTPException(status_code=400, detail="phone is required")

    guest = await service.lookup_by_phone(phone)
    return GuestEnvelope(guest=GuestResponse.from_record(guest) if guest else None)


@router.post(GUEST_URL, response_model=GuestEnvelope)
async def save_profile(
    profile: GuestIdentitySubmit,
    service: GuestService = Depends(get_guest_service),
) -> GuestEnvelope:
    """Create the guest for this phone, or update the name on the existing one."""
    guest = await service.upsert_profile(profile.name, profile.phone)
    return GuestEnvelope(guest=GuestResponse.from_record(guest))
