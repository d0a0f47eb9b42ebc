import pytest

from invite_site.guests.urls import ADMIN_GUESTS_URL, ADMIN_SUMMARY_URL


def admin_guest_url(guest_id: str) -> str:
    return f"{ADMIN_GUESTS_URL}/{guest_id}"


@pytest.mark.asyncio
async def test_list_empty(client):
    response = await client.get(ADMIN_GUESTS_URL)

    assert response.status_code == 200
    assert response.json() == {"guests": []}


@pytest.mark.asyncio
async def test_add_guest_and_list(client):
    response = await client.post(
        ADMIN_GUESTS_URL,
        json={"name": "Ann Lee", "phone": "555-123-4567", "rsvp": "yes", "plusOnes": 1, "scope": "wedding"},
    )
    assert response.status_code == 200
    added = response.json()["guest"]
    assert added["rsvp"] == "yes"
    assert added["scope"] == "wedding"

    guests = (await client.get(ADMIN_GUESTS_URL)).json()["guests"]
    assert [guest["id"] for guest in guests] == [added["id"]]


@pytest.mark.asyncio
async def test_admin_update_can_clear_rsvp(client):
    await client.post(ADMIN_GUESTS_URL, json={"name": "Ann", "phone": "5551234567", "rsvp": "yes", "plusOnes": 1})

    response = await client.post(
        ADMIN_GUESTS_URL,
        json={"name": "Ann", "phone": "5551234567", "rsvp": None, "plusOnes": 0, "scope": "all"},
    )

    guest = response.json()["guest"]
    assert guest["rsvp"] is None
    assert len((await client.get(ADMIN_GUESTS_URL)).json()["guests"]) == 1


@pytest.mark.asyncio
async def test_admin_unknown_rsvp_means_no_response(client):
    response = await client.post(ADMIN_GUESTS_URL, json={"name": "Ann", "phone": "5551234567", "rsvp": "perhaps"})

    assert response.status_code == 200
    assert response.json()["guest"]["rsvp"] is None


@pytest.mark.asyncio
async def test_admin_add_requires_phone(client):
    response = await client.post(ADMIN_GUESTS_URL, json={"name": "Ann", "phone": ""})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid phone number"}


@pytest.mark.asyncio
async def test_list_filters(client, guest_service):
    await guest_service.save_rsvp("Ann Lee", "5551111111", "yes", 1, "wedding")
    await guest_service.save_rsvp("Bob Stone", "5552222222", "no", 0, "all")

    wedding = (await client.get(ADMIN_GUESTS_URL, params={"scope": "wedding"})).json()["guests"]
    declined = (await client.get(ADMIN_GUESTS_URL, params={"rsvp": "no"})).json()["guests"]
    searched = (await client.get(ADMIN_GUESTS_URL, params={"search": "STONE"})).json()["guests"]

    assert [guest["name"] for guest in wedding] == ["Ann Lee"]
    assert [guest["name"] for guest in declined] == ["Bob Stone"]
    assert [guest["name"] for guest in searched] == ["Bob Stone"]


@pytest.mark.asyncio
async def test_list_rejects_unknown_filter(client):
    response = await client.get(ADMIN_GUESTS_URL, params={"rsvp": "perhaps"})

    assert response.status_code == 400
    assert "error" in response.json()


@pytest.mark.asyncio
async def test_delete_guest(client, guest_service):
    guest = await guest_service.upsert_profile("Ann", "5551234567")

    response = await client.delete(admin_guest_url(guest.id))

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert await guest_service.list_all() == []


@pytest.mark.asyncio
async def test_delete_unknown_guest(client, guest_service):
    await guest_service.upsert_profile("Ann", "5551234567")

    response = await client.delete(admin_guest_url("nonexistent"))

    assert response.status_code == 404
    assert response.json() == {"error": "Guest not found"}
    assert len(await guest_service.list_all()) == 1


@pytest.mark.asyncio
async def test_summary(client, guest_service):
    await guest_service.save_rsvp("Ann", "5551111111", "yes", 2, "all")
    await guest_service.save_rsvp("Bob", "5552222222", "no", 0, "all")
    await guest_service.save_rsvp("Cat", "5553333333", "maybe", 0, "wedding")

    response = await client.get(ADMIN_SUMMARY_URL)

    assert response.status_code == 200
    data = response.json()
    assert data["all"]["totalGuests"] == 2
    assert data["all"]["totalRsvps"] == 2
    assert data["all"]["totalPeople"] == 3
    assert data["all"]["yesPercent"] == 50
    assert data["wedding"]["maybe"] == 1
    assert data["wedding"]["maybePercent"] == 100


@pytest.mark.asyncio
async def test_unsupported_methods(client):
    put_response = await client.put(ADMIN_GUESTS_URL, json={})
    get_one_response = await client.get(admin_guest_url("g_whatever"))

    assert put_response.status_code == 405
    assert put_response.json() == {"error": "Method not allowed"}
    assert get_one_response.status_code == 405
