"""
HTTP endpoints, run against the in-memory storage
"""
import pytest

from conftest import destination_data


def _as(user):
    return {"X-User-Id": user.id}


@pytest.fixture
async def catalog(memory_storage):
    bali = await memory_storage.destinations.create_destination(
        destination_data(image_url="https://img.example/bali.jpg")
    )
    paris = await memory_storage.destinations.create_destination(destination_data(
        name="Paris City Tour",
        country="France",
        description="Museums, cafes and the Seine",
        price="2500",
        duration=5,
        rating="4.9",
        image_url="https://img.example/paris.jpg",
    ))
    await memory_storage.destinations.create_destination(
        destination_data(name="Closed Lodge", is_active=False)
    )
    return bali, paris


def _booking_payload(destination_id, **overrides):
    payload = {
        "destination_id": destination_id,
        "check_in": "2026-03-01",
        "check_out": "2026-03-08",
        "guests": 2,
        "total_amount": "1500.00",
    }
    payload.update(overrides)
    return payload


# =========================================================================
# SERVICE
# =========================================================================

async def test_root_and_health(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json()["name"] == "Wanderlux API"

    response = await client.get("/health/live")
    assert response.json() == {"status": "alive"}


# =========================================================================
# AUTH & USERS
# =========================================================================

async def test_register_then_login(client, memory_storage):
    response = await client.post("/api/auth/register", json={
        "username": "newbie",
        "password": "long-enough-password",
        "email": "newbie@example.com",
    })
    assert response.status_code == 201
    body = response.json()
    assert body["username"] == "newbie"
    assert "password" not in body

    response = await client.post("/api/auth/login", json={
        "username": "newbie",
        "password": "long-enough-password",
    })
    assert response.status_code == 200
    assert response.json()["last_login_at"] is not None

    actions = [log.action for log in await memory_storage.activity_logs.get_activity_logs()]
    assert actions == ["login", "register"]


async def test_register_taken_username(client, traveler):
    response = await client.post("/api/auth/register", json={
        "username": "traveler",
        "password": "another-password",
    })
    assert response.status_code == 409


async def test_login_wrong_password(client, traveler):
    response = await client.post("/api/auth/login", json={
        "username": "traveler",
        "password": "not-the-password",
    })
    assert response.status_code == 401


async def test_profile_requires_known_user(client):
    assert (await client.get("/api/users/me")).status_code == 401
    assert (await client.get("/api/users/me", headers={"X-User-Id": "ghost"})).status_code == 401


async def test_update_profile(client, traveler):
    response = await client.patch("/api/users/me", headers=_as(traveler), json={"first_name": "Tess"})

    assert response.status_code == 200
    assert response.json()["first_name"] == "Tess"


# =========================================================================
# DESTINATIONS & REVIEWS
# =========================================================================

async def test_list_destinations_active_by_rating(client, catalog):
    response = await client.get("/api/destinations")

    assert response.status_code == 200
    assert [d["name"] for d in response.json()] == ["Paris City Tour", "Bali Beach Retreat"]


async def test_browse_destinations(client, catalog):
    response = await client.get("/api/destinations", params={"search": "beach"})
    assert [d["name"] for d in response.json()] == ["Bali Beach Retreat"]

    response = await client.get("/api/destinations", params={"sort": "price-high"})
    assert [d["name"] for d in response.json()] == ["Paris City Tour", "Bali Beach Retreat"]

    response = await client.get("/api/destinations", params={"region": "europe", "budget": "2000-3000"})
    assert [d["name"] for d in response.json()] == ["Paris City Tour"]


async def test_browse_defaults_to_name_order(client, catalog):
    response = await client.get("/api/destinations", params={"duration": "6-7"})
    assert [d["name"] for d in response.json()] == ["Bali Beach Retreat"]

    response = await client.get("/api/destinations", params={"budget": "all", "search": "tour beach"})
    assert [d["name"] for d in response.json()] == ["Bali Beach Retreat", "Paris City Tour"]


async def test_get_missing_destination(client):
    assert (await client.get("/api/destinations/999")).status_code == 404


async def test_reviews(client, catalog, traveler):
    bali, _ = catalog

    response = await client.post(
        f"/api/destinations/{bali.id}/reviews",
        headers=_as(traveler),
        json={"rating": 5, "comment": "Perfect week"},
    )
    assert response.status_code == 201

    await client.post(
        f"/api/destinations/{bali.id}/reviews",
        headers=_as(traveler),
        json={"rating": 4, "comment": "Great surf"},
    )

    reviews = (await client.get(f"/api/destinations/{bali.id}/reviews")).json()
    assert [r["comment"] for r in reviews] == ["Great surf", "Perfect week"]
    assert reviews[0]["user"]["username"] == "traveler"

    stats = (await client.get(f"/api/destinations/{bali.id}/reviews/stats")).json()
    assert stats == {"average_rating": 4.5, "total_reviews": 2}


async def test_review_rating_out_of_range(client, catalog, traveler):
    bali, _ = catalog
    response = await client.post(
        f"/api/destinations/{bali.id}/reviews",
        headers=_as(traveler),
        json={"rating": 6, "comment": "Too good"},
    )
    assert response.status_code == 422


# =========================================================================
# BOOKINGS
# =========================================================================

async def test_create_and_list_bookings(client, catalog, traveler):
    bali, _ = catalog

    response = await client.post("/api/bookings", headers=_as(traveler), json=_booking_payload(bali.id))
    assert response.status_code == 201
    booking = response.json()
    assert booking["status"] == "confirmed"
    assert booking["payment_status"] == "pending"

    listed = (await client.get("/api/bookings", headers=_as(traveler))).json()
    assert [b["id"] for b in listed] == [booking["id"]]
    assert listed[0]["destination"]["name"] == "Bali Beach Retreat"


async def test_duplicate_booking_conflict(client, catalog, traveler):
    bali, _ = catalog
    await client.post("/api/bookings", headers=_as(traveler), json=_booking_payload(bali.id))

    response = await client.post("/api/bookings", headers=_as(traveler), json=_booking_payload(bali.id))

    assert response.status_code == 409
    assert "already" in response.json()["detail"].lower()


async def test_rebook_after_cancel(client, catalog, traveler):
    bali, _ = catalog
    created = (await client.post("/api/bookings", headers=_as(traveler), json=_booking_payload(bali.id))).json()

    response = await client.post(f"/api/bookings/{created['id']}/cancel", headers=_as(traveler))
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"

    response = await client.post("/api/bookings", headers=_as(traveler), json=_booking_payload(bali.id))
    assert response.status_code == 201


async def test_booking_rejects_bad_dates(client, catalog, traveler):
    bali, _ = catalog
    response = await client.post(
        "/api/bookings",
        headers=_as(traveler),
        json=_booking_payload(bali.id, check_out="2026-03-01"),
    )
    assert response.status_code == 422


async def test_booking_inactive_destination(client, memory_storage, traveler):
    closed = await memory_storage.destinations.create_destination(destination_data(is_active=False))

    response = await client.post("/api/bookings", headers=_as(traveler), json=_booking_payload(closed.id))

    assert response.status_code == 404


async def test_booking_belongs_to_owner(client, catalog, traveler, memory_storage):
    bali, _ = catalog
    created = (await client.post("/api/bookings", headers=_as(traveler), json=_booking_payload(bali.id))).json()
    stranger = await memory_storage.users.create_user({"username": "stranger", "password": "stranger-password"})

    response = await client.get(f"/api/bookings/{created['id']}", headers=_as(stranger))
    assert response.status_code == 403

    response = await client.patch(
        f"/api/bookings/{created['id']}",
        headers=_as(traveler),
        json={"payment_status": "paid"},
    )
    assert response.status_code == 200
    assert response.json()["payment_status"] == "paid"


# =========================================================================
# ADMIN
# =========================================================================

async def test_admin_routes_require_admin(client, traveler):
    assert (await client.get("/api/admin/users", headers=_as(traveler))).status_code == 403
    assert (await client.get("/api/admin/users")).status_code == 401


async def test_admin_create_destination_image_conflict(client, catalog, admin_user):
    payload = destination_data(name="Copycat Retreat", image_url="https://img.example/paris.jpg")

    response = await client.post("/api/admin/destinations", headers=_as(admin_user), json=payload)

    assert response.status_code == 409
    body = response.json()
    assert body["detail"] == "Image URL already in use by destination: Paris City Tour"
    assert body["conflict"] == "Paris City Tour"


async def test_admin_manage_destinations(client, admin_user, memory_storage):
    response = await client.post(
        "/api/admin/destinations",
        headers=_as(admin_user),
        json=destination_data(image_url="https://img.example/new.jpg"),
    )
    assert response.status_code == 201
    destination_id = response.json()["id"]

    response = await client.patch(
        f"/api/admin/destinations/{destination_id}",
        headers=_as(admin_user),
        json={"flash_sale": True, "discount_percentage": 20},
    )
    assert response.status_code == 200
    assert response.json()["flash_sale"] is True

    response = await client.delete(f"/api/admin/destinations/{destination_id}", headers=_as(admin_user))
    assert response.status_code == 200
    assert await memory_storage.destinations.get_destination(destination_id) is None

    actions = [log.action for log in await memory_storage.activity_logs.get_activity_logs()]
    assert actions == ["delete_destination", "update_destination", "create_destination"]


async def test_admin_update_missing_destination(client, admin_user):
    response = await client.patch("/api/admin/destinations/999", headers=_as(admin_user), json={"name": "Gone"})
    assert response.status_code == 404


async def test_admin_destinations_with_stats(client, catalog, admin_user, traveler):
    bali, paris = catalog
    await client.post("/api/bookings", headers=_as(traveler), json=_booking_payload(bali.id))

    response = await client.get("/api/admin/destinations", headers=_as(admin_user))

    assert response.status_code == 200
    stats = {d["name"]: d for d in response.json()}
    assert len(stats) == 3
    assert stats["Bali Beach Retreat"]["booking_count"] == 1
    assert stats["Bali Beach Retreat"]["revenue"] == "1500.00"
    assert stats["Paris City Tour"]["revenue"] == "0"


async def test_admin_delete_user(client, admin_user, traveler):
    response = await client.delete(f"/api/admin/users/{traveler.id}", headers=_as(admin_user))
    assert response.status_code == 200

    users = (await client.get("/api/admin/users", headers=_as(admin_user))).json()
    assert [u["username"] for u in users] == ["admin"]

    response = await client.delete(f"/api/admin/users/{admin_user.id}", headers=_as(admin_user))
    assert response.status_code == 400


async def test_admin_activity_log_limit(client, admin_user, memory_storage):
    for action in ("one", "two", "three"):
        await memory_storage.activity_logs.create_activity_log({"action": action})

    response = await client.get("/api/admin/activity-logs", headers=_as(admin_user), params={"limit": 2})

    assert [log["action"] for log in response.json()] == ["three", "two"]


async def test_admin_analytics(client, catalog, admin_user, traveler):
    bali, _ = catalog
    await client.post("/api/bookings", headers=_as(traveler), json=_booking_payload(bali.id))

    response = await client.get("/api/admin/analytics", headers=_as(admin_user))

    assert response.status_code == 200
    body = response.json()
    assert body["revenue"]["total"] == "1500.00"
    assert body["bookings"]["total"] == 1
    assert body["users"]["total"] == 2


async def test_admin_revenue_with_utc_offsets(client, catalog, admin_user, traveler):
    bali, _ = catalog
    await client.post("/api/bookings", headers=_as(traveler), json=_booking_payload(bali.id))

    response = await client.get(
        "/api/admin/analytics/revenue",
        headers=_as(admin_user),
        params={"start_date": "2026-01-01T00:00:00Z", "end_date": "2100-01-01T00:00:00+02:00"},
    )

    assert response.status_code == 200
    assert response.json()["total"] == "1500.00"


# =========================================================================
# CURRENCIES
# =========================================================================

async def test_list_currencies(client):
    codes = [c["code"] for c in (await client.get("/api/currencies")).json()]
    assert codes == ["USD", "EUR", "GBP", "JPY", "CAD", "AUD", "CHF", "CNY", "INR", "SGD"]


async def test_convert_endpoint(client):
    response = await client.get("/api/currencies/convert", params={"amount": 100, "from": "USD", "to": "eur"})

    body = response.json()
    assert body["to_currency"] == "EUR"
    assert body["converted"] == pytest.approx(85.0)
    assert body["formatted"] == "€85.00"


async def test_currency_preference(client, preference_data):
    assert (await client.get("/api/preferences/currency")).json() == {"currency": "AUD"}

    response = await client.put("/api/preferences/currency", json={"currency": "eur"})
    assert response.json() == {"currency": "EUR"}
    assert (await client.get("/api/preferences/currency")).json() == {"currency": "EUR"}
    assert preference_data == {"test-client:preferred-currency": "EUR"}


async def test_saved_stale_currency_is_reset(client, preference_data):
    await client.put("/api/preferences/currency", json={"currency": "USD"})

    assert (await client.get("/api/preferences/currency")).json() == {"currency": "AUD"}
    assert preference_data == {}


async def test_unsupported_currency_preference(client):
    response = await client.put("/api/preferences/currency", json={"currency": "XYZ"})
    assert response.status_code == 400
