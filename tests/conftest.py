import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./event_booking_test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["LOG_JSON"] = "false"
os.environ["RATE_LIMIT_STORAGE_URI"] = "memory://"
os.environ["REDIS_URL"] = "redis://localhost:6399/15"

from decimal import Decimal
from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from event_booking.core.database import Database
from event_booking.core.redis import RedisClient
from event_booking.core.security import create_access_token
from event_booking.main import app, attach_services
from event_booking.middleware.rate_limiter import limiter
from event_booking.models import Booking, Event, UserRole
from event_booking.services import (
    BookingService,
    CacheService,
    EventService,
    OAuthError,
    OAuthProfile,
    UserService,
)


class FakeOAuthClient:
    """Stands in for Google: every code except 'bad' yields the same profile"""

    def __init__(self, profile=None):
        self.profile = profile or OAuthProfile(
            email="oauth.user@example.com",
            name="OAuth User",
            image="https://example.com/avatar.png",
        )
        self.codes = []

    def authorization_url(self, state: str) -> str:
        return f"https://accounts.google.com/o/oauth2/v2/auth?state={state}"

    async def fetch_profile(self, code: str) -> OAuthProfile:
        self.codes.append(code)
        if code == "bad":
            raise OAuthError("invalid_grant")
        return self.profile

    async def close(self):
        pass


@pytest_asyncio.fixture
async def database(tmp_path):
    """Fresh SQLite file database per test"""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'booking.db'}")
    await db.create_all()
    yield db
    await db.drop_all()
    await db.dispose()


@pytest.fixture
def booking_service(database):
    return BookingService(database, max_seats_per_booking=10, transaction_timeout=5.0)


@pytest.fixture
def event_service(database):
    return EventService(database)


@pytest.fixture
def user_service(database):
    return UserService(database)


@pytest_asyncio.fixture
async def user(user_service):
    return await user_service.get_or_create(email="alice@example.com", name="Alice")


@pytest_asyncio.fixture
async def other_user(user_service):
    return await user_service.get_or_create(email="bob@example.com", name="Bob")


@pytest_asyncio.fixture
async def admin(user_service):
    created = await user_service.get_or_create(email="admin@example.com", name="Admin")
    return await user_service.set_role(created.id, UserRole.ADMIN)


@pytest.fixture
def make_event(event_service):
    """Factory creating events with a given capacity and price"""

    async def _make_event(total_seats: int = 100, price: str = "100.00", title: str = "Concert"):
        return await event_service.create_event(
            {
                "title": title,
                "description": "Test event",
                "date": datetime.utcnow() + timedelta(days=30),
                "time": "8:00 PM",
                "venue": "Main Hall",
                "total_seats": total_seats,
                "price": Decimal(price),
            }
        )

    return _make_event


@pytest.fixture
def check_inventory(database):
    """
    Assert available + seats of active bookings == total for an event,
    and return the event's current available_seats.
    """

    async def _check(event_id: int) -> int:
        async with database.session() as session:
            event = await session.get(Event, event_id)
            result = await session.execute(
                select(Booking).where(Booking.event_id == event_id)
            )
            bookings = list(result.scalars().all())

        active_seats = sum(b.seat_count for b in bookings if b.is_active)
        assert 0 <= event.available_seats <= event.total_seats
        assert event.available_seats + active_seats == event.total_seats
        return event.available_seats

    return _check


@pytest.fixture
def oauth_client():
    return FakeOAuthClient()


@pytest_asyncio.fixture
async def client(database, oauth_client):
    """HTTP client against the app wired to the test database"""
    # Never connected, so every cache call is a no-op
    cache = CacheService(RedisClient("redis://localhost:6399/15"))
    attach_services(app, database, cache=cache, oauth_client=oauth_client)
    limiter.reset()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def user_headers(user):
    return auth_headers(user)


@pytest.fixture
def other_headers(other_user):
    return auth_headers(other_user)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)
