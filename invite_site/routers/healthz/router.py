from fastapi import APIRouter, Depends
from pydantic import BaseModel

from invite_site.config.settings import settings
from invite_site.guests.service import GuestService, get_guest_service

router = APIRouter()


class HealthCheckResponse(BaseModel):
    status: str
    version: str = "0.1.0"
    backend: str
    pending_writes: int


@router.get("/", response_model=HealthCheckResponse)
async def health_check(service: GuestService = Depends(get_guest_service)) -> HealthCheckResponse:
    """
    Health check endpoint. Reports the configured guest store and the depth of
    the write queue without touching the store.
    """
    return HealthCheckResponse(
        status="healthy",
        backend=settings.guest_backend,
        pending_writes=service.serializer.pending,
    )
