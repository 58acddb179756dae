"""Route tests for the admin, hotel and destination endpoints."""

import pytest
from httpx import AsyncClient

from conftest import ADMIN_ID, GUEST_ID, SECRET_CODE, as_user

HOTEL_BODY = {
    "name": "City Center Hotel",
    "price": 149,
    "image": "https://example.com/city.jpg",
    "location": "New York",
    "description": "Manhattan.",
    "amenities": ["Free WiFi"],
}

DESTINATION_BODY = {
    "name": "Kyoto",
    "country": "Japan",
    "description": "Temples and gardens.",
    "image": "https://example.com/kyoto.jpg",
    "rating": 4.8,
    "hotelCount": 30,
    "popularAttractions": "Fushimi Inari, Kinkaku-ji",
    "climate": "Temperate",
    "bestTimeToVisit": "Spring",
}


@pytest.fixture
async def hotel_id(client: AsyncClient):
    resp = await client.post("/api/admin/hotels", json=HOTEL_BODY, headers=as_user(ADMIN_ID))
    return resp.json()["id"]


async def _guest_booking(client, hotel_id):
    resp = await client.post(
        "/api/bookings",
        json={"hotelId": hotel_id, "checkIn": "2024-01-01", "checkOut": "2024-01-03", "guests": 1},
        headers=as_user(GUEST_ID),
    )
    return resp.json()["id"]


# --- admin bookings ---


async def test_admin_lists_all_bookings(client, hotel_id):
    await _guest_booking(client, hotel_id)

    resp = await client.get("/api/admin/bookings", headers=as_user(ADMIN_ID))

    assert resp.status_code == 200
    assert len(resp.json()) == 1
    assert resp.json()[0]["hotel"]["name"] == "City Center Hotel"


async def test_non_admin_cannot_list_all_bookings(client):
    resp = await client.get("/api/admin/bookings", headers=as_user(GUEST_ID))
    assert resp.status_code == 403
    assert resp.json() == {"error": "Forbidden"}


async def test_unauthenticated_admin_endpoint(client):
    resp = await client.get("/api/admin/bookings")
    assert resp.status_code == 401


async def test_non_admin_cannot_update_status(client, hotel_id):
    booking_id = await _guest_booking(client, hotel_id)

    by_id = await client.patch(
        f"/api/admin/bookings/{booking_id}", json={"status": "completed"}, headers=as_user(GUEST_ID)
    )
    by_body = await client.patch(
        "/api/admin/bookings", json={"bookingId": booking_id, "status": "completed"}, headers=as_user(GUEST_ID)
    )

    assert by_id.status_code == 403
    assert by_body.status_code == 403
    listed = await client.get("/api/bookings", headers=as_user(GUEST_ID))
    assert listed.json()[0]["status"] == "pending"


async def test_admin_updates_status_with_body_shape(client, hotel_id):
    booking_id = await _guest_booking(client, hotel_id)

    resp = await client.patch(
        "/api/admin/bookings", json={"bookingId": booking_id, "status": "rejected"}, headers=as_user(ADMIN_ID)
    )

    assert resp.status_code == 200
    assert resp.json()["status"] == "rejected"


async def test_admin_update_unknown_booking(client):
    resp = await client.patch(
        "/api/admin/bookings/65a1f0c2e4b0a1b2c3d4e5f6", json={"status": "completed"}, headers=as_user(ADMIN_ID)
    )
    assert resp.status_code == 404


# --- hotels ---


async def test_public_hotel_listing(client, hotel_id):
    resp = await client.get("/api/hotels")

    assert resp.status_code == 200
    assert [h["id"] for h in resp.json()] == [hotel_id]
    assert resp.json()[0]["displayPrice"] == 149


async def test_non_admin_cannot_create_hotel(client):
    resp = await client.post("/api/admin/hotels", json=HOTEL_BODY, headers=as_user(GUEST_ID))
    assert resp.status_code == 403
    assert (await client.get("/api/hotels")).json() == []


async def test_create_hotel_missing_fields(client):
    resp = await client.post("/api/admin/hotels", json={"name": "Half a hotel"}, headers=as_user(ADMIN_ID))
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("Missing required fields")


async def test_patch_hotel_discount(client, hotel_id):
    resp = await client.patch(f"/api/hotels/{hotel_id}", json={"discountPercentage": 20}, headers=as_user(ADMIN_ID))

    assert resp.status_code == 200
    assert resp.json()["discountPercentage"] == 20
    assert resp.json()["displayPrice"] == 119

    deals = await client.get("/api/hotels", params={"discounted": "true"})
    assert [h["id"] for h in deals.json()] == [hotel_id]


async def test_patch_hotel_bad_discount(client, hotel_id):
    resp = await client.patch(f"/api/hotels/{hotel_id}", json={"discountPercentage": 150}, headers=as_user(ADMIN_ID))
    assert resp.status_code == 400
    assert resp.json() == {"error": "Discount percentage must be between 0 and 100"}


async def test_delete_hotel(client, hotel_id):
    resp = await client.delete(f"/api/hotels/{hotel_id}", headers=as_user(ADMIN_ID))
    assert resp.status_code == 200

    assert (await client.get(f"/api/hotels/{hotel_id}")).status_code == 404


async def test_delete_hotel_by_query(client, hotel_id):
    missing = await client.delete("/api/admin/hotels", headers=as_user(ADMIN_ID))
    assert missing.status_code == 400

    resp = await client.delete("/api/admin/hotels", params={"id": hotel_id}, headers=as_user(ADMIN_ID))
    assert resp.status_code == 200
    assert resp.json() == {"message": "Hotel deleted successfully"}


async def test_non_admin_cannot_delete_hotel(client, hotel_id):
    resp = await client.delete(f"/api/hotels/{hotel_id}", headers=as_user(GUEST_ID))
    assert resp.status_code == 403
    assert (await client.get(f"/api/hotels/{hotel_id}")).status_code == 200


# --- destinations ---


async def test_destination_lifecycle(client):
    created = await client.post("/api/destinations", json=DESTINATION_BODY, headers=as_user(ADMIN_ID))
    assert created.status_code == 201
    destination_id = created.json()["id"]
    assert created.json()["popularAttractions"] == ["Fushimi Inari", "Kinkaku-ji"]

    listed = await client.get("/api/destinations")
    assert listed.json()[0]["hotelCount"] == 30

    updated = await client.put(
        f"/api/destinations/{destination_id}", json={"climate": "Humid subtropical"}, headers=as_user(ADMIN_ID)
    )
    assert updated.json()["climate"] == "Humid subtropical"

    deleted = await client.delete(f"/api/destinations/{destination_id}", headers=as_user(ADMIN_ID))
    assert deleted.status_code == 200
    assert (await client.get(f"/api/destinations/{destination_id}")).status_code == 404


async def test_create_destination_missing_fields(client):
    body = {key: value for key, value in DESTINATION_BODY.items() if key not in ("climate", "image")}
    resp = await client.post("/api/destinations", json=body, headers=as_user(ADMIN_ID))

    assert resp.status_code == 400
    assert "image" in resp.json()["error"]
    assert "climate" in resp.json()["error"]


async def test_non_admin_cannot_create_destination(client):
    resp = await client.post("/api/destinations", json=DESTINATION_BODY, headers=as_user(GUEST_ID))
    assert resp.status_code == 403


# --- admin registry ---


async def test_check_admin(client):
    assert (await client.get("/api/admin/check", headers=as_user(ADMIN_ID))).json() == {"success": True}
    assert (await client.get("/api/admin/check", headers=as_user(GUEST_ID))).status_code == 403


async def test_validate_secret_code(client):
    ok = await client.post("/api/admin/validate", json={"secretCode": SECRET_CODE})
    bad = await client.post("/api/admin/validate", json={"secretCode": "nope"})

    assert ok.json() == {"success": True}
    assert bad.status_code == 401
    assert bad.json() == {"error": "Invalid secret code"}


async def test_register_admin_grants_access(client):
    resp = await client.post(
        "/api/admin/register", json={"userId": GUEST_ID, "secretCode": SECRET_CODE}, headers=as_user(GUEST_ID)
    )

    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert resp.json()["admin"]["userId"] == GUEST_ID
    assert (await client.get("/api/admin/check", headers=as_user(GUEST_ID))).status_code == 200


async def test_register_admin_wrong_code(client):
    resp = await client.post(
        "/api/admin/register", json={"userId": GUEST_ID, "secretCode": "nope"}, headers=as_user(GUEST_ID)
    )
    assert resp.status_code == 401
    assert (await client.get("/api/admin/check", headers=as_user(GUEST_ID))).status_code == 403


async def test_register_admin_for_someone_else(client):
    resp = await client.post(
        "/api/admin/register", json={"userId": "user_x", "secretCode": SECRET_CODE}, headers=as_user(GUEST_ID)
    )
    assert resp.status_code == 401


async def test_health(client):
    resp = await client.get("/health")
    assert resp.json() == {"status": "ok"}
