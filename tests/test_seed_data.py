import pytest
from sqlalchemy import func, select

from event_booking.core.config import settings
from event_booking.core.database import Database
from event_booking.models import Event, User, UserRole
from event_booking.scripts import seed_data


@pytest.mark.asyncio
async def test_seed_is_idempotent(tmp_path, monkeypatch):
    url = f"sqlite+aiosqlite:///{tmp_path / 'seed.db'}"
    monkeypatch.setattr(settings, "DATABASE_URL", url)

    await seed_data.seed_database("owner@example.com")
    await seed_data.seed_database("owner@example.com")

    database = Database(url)
    try:
        async with database.session() as session:
            events = await session.scalar(select(func.count(Event.id)))
            admin = await session.scalar(select(User).where(User.email == "owner@example.com"))
    finally:
        await database.dispose()

    assert events == len(seed_data.SAMPLE_EVENTS)
    assert admin.role == UserRole.ADMIN
