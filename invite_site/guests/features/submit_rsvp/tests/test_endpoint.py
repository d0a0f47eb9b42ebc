import asyncio

import pytest
from httpx import ASGITransport, AsyncClient

from invite_site.guests.errors import BackendError
from invite_site.guests.repository.base import GuestStore
from invite_site.guests.service import GuestService, get_guest_service
from invite_site.guests.urls import RSVP_URL
from invite_site.main import app


class BrokenGuestStore(GuestStore):
    """Store whose every call fails, as an unreachable spreadsheet would."""

    async def read_all(self):
        raise BackendError("Google Sheets request failed: 503")

    async def insert(self, record):
        raise BackendError("Google Sheets request failed: 503")

    async def update(self, record):
        raise BackendError("Google Sheets request failed: 503")

    async def delete_by_id(self, guest_id):
        raise BackendError("Google Sheets request failed: 503")

    async def confirm_identity(self, record, durable_id):
        raise BackendError("Google Sheets request failed: 503")


def rsvp_payload(**overrides) -> dict:
    return {"name": "Ann Lee", "phone": "+1 (555) 123-4567", "rsvp": "yes", "plusOnes": 2, **overrides}


@pytest.mark.asyncio
async def test_submit_rsvp_creates_guest(client):
    response = await client.post(RSVP_URL, json=rsvp_payload())

    assert response.status_code == 200
    guest = response.json()["guest"]
    assert guest["phone"] == "+15551234567"
    assert guest["rsvp"] == "yes"
    assert guest["plusOnes"] == 2
    assert guest["scope"] == "all"


@pytest.mark.asyncio
async def test_submit_rsvp_updates_same_guest(client, guest_service):
    first = (await client.post(RSVP_URL, json=rsvp_payload())).json()["guest"]
    second = (
        await client.post(RSVP_URL, json=rsvp_payload(phone="555-123-4567", rsvp="maybe", plusOnes=1))
    ).json()["guest"]

    assert second["id"] == first["id"]
    assert second["rsvp"] == "maybe"
    assert second["plusOnes"] == 1
    assert len(await guest_service.list_all()) == 1


@pytest.mark.asyncio
async def test_submit_rsvp_wedding_scope(client):
    response = await client.post(RSVP_URL, json=rsvp_payload(scope="wedding"))

    assert response.json()["guest"]["scope"] == "wedding"


@pytest.mark.asyncio
async def test_unknown_scope_falls_back_to_all(client):
    response = await client.post(RSVP_URL, json=rsvp_payload(scope="reception"))

    assert response.json()["guest"]["scope"] == "all"


@pytest.mark.asyncio
async def test_rsvp_choice_is_case_insensitive(client):
    response = await client.post(RSVP_URL, json=rsvp_payload(rsvp="MAYBE"))

    assert response.status_code == 200
    assert response.json()["guest"]["rsvp"] == "maybe"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "plus_ones, expected",
    [(-5, 0), (99, 10), ("3", 3), ("lots", 0), (None, 0), (2.9, 2)],
)
async def test_plus_ones_are_clamped(client, plus_ones, expected):
    response = await client.post(RSVP_URL, json=rsvp_payload(plusOnes=plus_ones))

    assert response.status_code == 200
    assert response.json()["guest"]["plusOnes"] == expected


@pytest.mark.asyncio
async def test_declining_drops_plus_ones(client):
    response = await client.post(RSVP_URL, json=rsvp_payload(rsvp="no", plusOnes=5))

    assert response.json()["guest"]["plusOnes"] == 0


@pytest.mark.asyncio
async def test_invalid_rsvp_choice(client):
    response = await client.post(RSVP_URL, json=rsvp_payload(rsvp="invalid"))

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid RSVP choice"}


@pytest.mark.asyncio
async def test_missing_name(client):
    response = await client.post(RSVP_URL, json=rsvp_payload(name=""))

    assert response.status_code == 400
    assert response.json() == {"error": "Name is required"}


@pytest.mark.asyncio
async def test_concurrent_submissions_keep_one_guest(client, guest_service):
    responses = await asyncio.gather(
        *(client.post(RSVP_URL, json=rsvp_payload(plusOnes=n)) for n in range(8))
    )

    assert all(response.status_code == 200 for response in responses)
    assert len({response.json()["guest"]["id"] for response in responses}) == 1
    assert len(await guest_service.list_all()) == 1


@pytest.mark.asyncio
async def test_backend_failure_is_a_server_error(client_factory):
    broken = GuestService(store=BrokenGuestStore())

    async with client_factory({get_guest_service: lambda: broken}) as client:
        response = await client.post(RSVP_URL, json=rsvp_payload())

    assert response.status_code == 500
    assert response.json() == {"error": "Google Sheets request failed: 503"}


@pytest.mark.asyncio
async def test_get_is_not_allowed(client):
    response = await client.get(RSVP_URL)

    assert response.status_code == 405
    assert response.json() == {"error": "Method not allowed"}


class CrashingGuestStore(BrokenGuestStore):
    """Store that fails with an error nobody anticipated."""

    async def read_all(self):
        raise RuntimeError("unexpected")


@pytest.mark.asyncio
async def test_unexpected_failure_keeps_error_shape():
    crashing = GuestService(store=CrashingGuestStore())
    app.dependency_overrides[get_guest_service] = lambda: crashing
    # The server error middleware re-raises after responding
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post(RSVP_URL, json=rsvp_payload())
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
