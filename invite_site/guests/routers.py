from fastapi import APIRouter

from .features.admin_guests.router import router as admin_guests_router
from .features.guest_profile.router import router as guest_profile_router
from .features.submit_rsvp.router import router as submit_rsvp_router

router = APIRouter()

router.include_router(guest_profile_router)
router.include_router(submit_rsvp_router)
router.include_router(admin_guests_router)
