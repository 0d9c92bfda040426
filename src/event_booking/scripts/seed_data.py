"""
Seed script to populate the database with sample data

Usage:
    python -m event_booking.scripts.seed_data [admin-email]

The given email (default admin@example.com) is created or promoted to ADMIN
so it can manage events once it logs in through Google.
"""
import asyncio
import sys
from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy import select

from event_booking.core.config import settings
from event_booking.core.database import Database
from event_booking.models import Event, UserRole
from event_booking.services import EventService, UserService

SAMPLE_EVENTS = [
    {
        "title": "Live Concert - The Midnight Echoes",
        "description": "An evening of synthwave under the stars",
        "days_from_now": 30,
        "time": "8:00 PM",
        "venue": "Riverside Arena",
        "total_seats": 10000,
        "price": Decimal("1500.00"),
    },
    {
        "title": "Tech Conference 2026",
        "description": "Two days of talks on distributed systems",
        "days_from_now": 45,
        "time": "9:00 AM",
        "venue": "Convention Center Hall B",
        "total_seats": 800,
        "price": Decimal("4999.00"),
    },
    {
        "title": "Stand-up Comedy Night",
        "description": None,
        "days_from_now": 7,
        "time": "9:30 PM",
        "venue": "The Laugh Factory",
        "total_seats": 120,
        "price": Decimal("499.00"),
    },
]


async def create_admin(user_service: UserService, email: str):
    """Create the admin user, or promote an existing one"""
    user = await user_service.get_or_create(email=email, name="Admin", provider="seed")
    if user.role != UserRole.ADMIN:
        await user_service.set_role(user.id, UserRole.ADMIN)
        print(f"Promoted {email} to ADMIN")
    else:
        print(f"Admin {email} already exists, skipping...")


async def create_sample_events(database: Database, event_service: EventService):
    """Create sample events, skipping titles that already exist"""
    now = datetime.utcnow()
    for event_data in SAMPLE_EVENTS:
        async with database.session() as session:
            existing = await session.scalar(
                select(Event).where(Event.title == event_data["title"])
            )
        if existing:
            print(f"Event '{event_data['title']}' already exists, skipping...")
            continue

        data = dict(event_data)
        data["date"] = now + timedelta(days=data.pop("days_from_now"))
        event = await event_service.create_event(data)
        print(f"Created event {event.id}: {event.title} ({event.total_seats} seats)")


async def seed_database(admin_email: str = "admin@example.com"):
    database = Database(settings.DATABASE_URL, echo=False)
    try:
        await database.create_all()
        await create_admin(UserService(database), admin_email)
        await create_sample_events(database, EventService(database))
        print("✅ Seeding complete")
    finally:
        await database.dispose()


if __name__ == "__main__":
    asyncio.run(seed_database(*sys.argv[1:2]))
