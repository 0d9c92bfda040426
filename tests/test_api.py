"""
API tests: routing, status code mapping and access control
"""
import asyncio
from decimal import Decimal

import pytest

from event_booking.main import app
from event_booking.services import BookingService

EVENT_PAYLOAD = {
    "title": "Jazz Night",
    "description": "Live quartet",
    "date": "2030-06-01T20:00:00",
    "time": "8:00 PM",
    "venue": "Blue Room",
    "total_seats": 100,
    "price": "25.50",
}


# ==================== Events ====================

@pytest.mark.asyncio
async def test_admin_creates_and_reads_event(client, admin_headers):
    response = await client.post("/api/v1/events", json=EVENT_PAYLOAD, headers=admin_headers)

    assert response.status_code == 201
    created = response.json()
    assert created["available_seats"] == 100
    assert Decimal(created["price"]) == Decimal("25.50")

    response = await client.get(f"/api/v1/events/{created['id']}")
    assert response.status_code == 200
    assert response.json()["title"] == "Jazz Night"

    response = await client.get("/api/v1/events")
    assert response.status_code == 200
    assert response.json()["total"] == 1


@pytest.mark.asyncio
async def test_create_event_requires_admin(client, user_headers):
    response = await client.post("/api/v1/events", json=EVENT_PAYLOAD, headers=user_headers)
    assert response.status_code == 403

    response = await client.post("/api/v1/events", json=EVENT_PAYLOAD)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_get_unknown_event_returns_404(client):
    response = await client.get("/api/v1/events/9999")

    assert response.status_code == 404
    assert response.json()["error"] == "NOT_FOUND"
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_update_and_delete_event(client, admin_headers, make_event):
    event = await make_event(total_seats=10)

    response = await client.put(
        f"/api/v1/events/{event.id}",
        json={"total_seats": 15, "venue": "Big Room"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["available_seats"] == 15
    assert response.json()["venue"] == "Big Room"

    response = await client.delete(f"/api/v1/events/{event.id}", headers=admin_headers)
    assert response.status_code == 200

    response = await client.get(f"/api/v1/events/{event.id}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_event_with_bookings_returns_409(client, admin_headers, user_headers, make_event):
    event = await make_event(total_seats=10)
    await client.post(
        "/api/v1/bookings", json={"event_id": event.id, "seat_count": 1}, headers=user_headers
    )

    response = await client.delete(f"/api/v1/events/{event.id}", headers=admin_headers)

    assert response.status_code == 409
    assert response.json()["error"] == "EVENT_HAS_BOOKINGS"


# ==================== Bookings ====================

@pytest.mark.asyncio
async def test_create_booking(client, user_headers, user, make_event):
    event = await make_event(total_seats=100, price="40.00")

    response = await client.post(
        "/api/v1/bookings",
        json={"event_id": event.id, "seat_count": 3},
        headers=user_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["booking"]["status"] == "PENDING"
    assert body["booking"]["user_id"] == user.id
    assert Decimal(body["booking"]["amount"]) == Decimal("120.00")
    assert body["booking"]["event"]["id"] == event.id

    response = await client.get(f"/api/v1/events/{event.id}")
    assert response.json()["available_seats"] == 97


@pytest.mark.asyncio
async def test_create_booking_requires_auth(client, make_event):
    event = await make_event()

    response = await client.post("/api/v1/bookings", json={"event_id": event.id, "seat_count": 1})
    assert response.status_code == 401

    response = await client.post(
        "/api/v1/bookings",
        json={"event_id": event.id, "seat_count": 1},
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_booking_error_mapping(client, user_headers, make_event):
    event = await make_event(total_seats=5)

    response = await client.post(
        "/api/v1/bookings", json={"event_id": 9999, "seat_count": 1}, headers=user_headers
    )
    assert response.status_code == 404

    response = await client.post(
        "/api/v1/bookings", json={"event_id": event.id, "seat_count": 6}, headers=user_headers
    )
    assert response.status_code == 409
    assert response.json()["error"] == "INSUFFICIENT_INVENTORY"

    response = await client.post(
        "/api/v1/bookings", json={"event_id": event.id, "seat_count": 0}, headers=user_headers
    )
    assert response.status_code == 400
    assert response.json()["error"] == "INVALID_REQUEST"


@pytest.mark.asyncio
async def test_timeout_maps_to_503(client, user_headers, make_event, database, monkeypatch):
    event = await make_event()
    service = BookingService(database, transaction_timeout=0.05)

    async def slow_create(session, event_id, user_id, seat_count):
        await asyncio.sleep(1)

    monkeypatch.setattr(service, "_create_booking", slow_create)
    app.state.booking_service = service

    response = await client.post(
        "/api/v1/bookings", json={"event_id": event.id, "seat_count": 1}, headers=user_headers
    )

    assert response.status_code == 503
    assert response.json()["error"] == "TIMEOUT"
    assert response.headers["Retry-After"] == "1"


@pytest.mark.asyncio
async def test_confirm_and_cancel_booking(client, user_headers, make_event):
    event = await make_event(total_seats=10)
    created = await client.post(
        "/api/v1/bookings", json={"event_id": event.id, "seat_count": 2}, headers=user_headers
    )
    booking_id = created.json()["booking"]["id"]

    response = await client.patch(f"/api/v1/bookings/{booking_id}/confirm", headers=user_headers)
    assert response.status_code == 200
    assert response.json()["booking"]["status"] == "CONFIRMED"

    response = await client.patch(f"/api/v1/bookings/{booking_id}/cancel", headers=user_headers)
    assert response.status_code == 200
    assert response.json()["booking"]["status"] == "CANCELLED"

    response = await client.patch(f"/api/v1/bookings/{booking_id}/cancel", headers=user_headers)
    assert response.status_code == 409
    assert response.json()["error"] == "ALREADY_CANCELLED"

    response = await client.get(f"/api/v1/events/{event.id}")
    assert response.json()["available_seats"] == 10


@pytest.mark.asyncio
async def test_unknown_booking_returns_404(client, user_headers):
    response = await client.patch("/api/v1/bookings/777/confirm", headers=user_headers)
    assert response.status_code == 404

    response = await client.patch("/api/v1/bookings/777/cancel", headers=user_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_booking_ownership(client, user_headers, other_headers, admin_headers, make_event):
    event = await make_event()
    created = await client.post(
        "/api/v1/bookings", json={"event_id": event.id, "seat_count": 1}, headers=user_headers
    )
    booking_id = created.json()["booking"]["id"]

    response = await client.get(f"/api/v1/bookings/{booking_id}", headers=other_headers)
    assert response.status_code == 403

    response = await client.patch(f"/api/v1/bookings/{booking_id}/cancel", headers=other_headers)
    assert response.status_code == 403

    response = await client.get(f"/api/v1/bookings/{booking_id}", headers=user_headers)
    assert response.status_code == 200

    response = await client.get(f"/api/v1/bookings/{booking_id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["booking"]["user"]["email"] == "alice@example.com"


@pytest.mark.asyncio
async def test_my_bookings_and_admin_listing(client, user_headers, other_headers, admin_headers, make_event):
    event = await make_event()
    for headers in (user_headers, user_headers, other_headers):
        await client.post(
            "/api/v1/bookings", json={"event_id": event.id, "seat_count": 1}, headers=headers
        )

    response = await client.get("/api/v1/bookings/my-bookings", headers=user_headers)
    assert response.status_code == 200
    assert response.json()["total"] == 2
    assert all(b["user"] is None for b in response.json()["bookings"])
    assert all(b["event"]["id"] == event.id for b in response.json()["bookings"])

    response = await client.get("/api/v1/bookings", headers=user_headers)
    assert response.status_code == 403

    response = await client.get("/api/v1/bookings", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["total"] == 3

    response = await client.get("/api/v1/bookings?status=CANCELLED", headers=admin_headers)
    assert response.json()["total"] == 0


# ==================== Health ====================

@pytest.mark.asyncio
async def test_health_and_metrics(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["database"] == "healthy"
    assert "X-Trace-ID" in response.headers

    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "bookings_created_total" in response.text


@pytest.mark.asyncio
async def test_trace_id_is_propagated(client):
    response = await client.get("/", headers={"X-Trace-ID": "trace-123"})

    assert response.status_code == 200
    assert response.headers["X-Trace-ID"] == "trace-123"
