from contextlib import asynccontextmanager

import pytest
from httpx import ASGITransport, AsyncClient

from invite_site.guests.repository.json_store import JsonFileGuestStore
from invite_site.guests.service import GuestService, get_guest_service
from invite_site.main import app


@pytest.fixture
def guests_path(tmp_path):
    """Location of the JSON guest document for this test."""
    return tmp_path / "data" / "guests.json"


@pytest.fixture
def guest_store(guests_path):
    """A file-backed store with no seed document."""
    return JsonFileGuestStore(guests_path)


@pytest.fixture
def guest_service(guest_store):
    """A fresh service, and so a fresh write queue, per test."""
    return GuestService(store=guest_store)


@pytest.fixture
def client_factory():
    """Build a test client with the given dependency overrides applied."""

    @asynccontextmanager
    async def _client_factory(overrides: dict | None = None):
        app.dependency_overrides.update(overrides or {})
        transport = ASGITransport(app=app)
        try:
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                yield ac
        finally:
            app.dependency_overrides.clear()

    return _client_factory


@pytest.fixture
async def client(client_factory, guest_service):
    """Create a test client wired to the per-test guest service."""
    async with client_factory({get_guest_service: lambda: guest_service}) as ac:
        yield ac
