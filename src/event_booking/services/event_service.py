"""
Event Service with Redis caching
"""
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select, update

from event_booking.core.database import Database
from event_booking.models import Booking, Event
from event_booking.services.cache_service import CacheService
from event_booking.services.errors import (
    EventHasBookingsError,
    EventNotFoundError,
    CapacityBelowReservedError,
    InvalidBookingRequestError,
)
import logging

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "description", "date", "time", "venue", "price")


class EventService:
    """Service for event catalog operations with caching"""

    def __init__(self, database: Database, cache: Optional[CacheService] = None):
        self.database = database
        self.cache = cache

    async def create_event(self, data: Dict[str, Any]) -> Event:
        """Create an event; its whole capacity starts out available"""
        total_seats = data["total_seats"]
        if total_seats < 0:
            raise InvalidBookingRequestError("total_seats cannot be negative")

        async with self.database.transaction() as session:
            event = Event(
                title=data["title"],
                description=data.get("description"),
                date=data["date"],
                time=data.get("time"),
                venue=data["venue"],
                total_seats=total_seats,
                available_seats=total_seats,
                price=data["price"],
            )
            session.add(event)
            await session.flush()
            await session.refresh(event)

        logger.info(f"Event {event.id} created", extra={"event_id": event.id})
        await self._invalidate(event.id)
        return event

    async def list_events(self, page: int = 1, page_size: int = 10) -> Tuple[List[Event], int]:
        """List events ordered by date with pagination"""
        async with self.database.session() as session:
            total = await session.scalar(select(func.count(Event.id)))

            query = (
                select(Event)
                .order_by(Event.date.asc(), Event.id.asc())
                .offset((page - 1) * page_size)
                .limit(page_size)
            )
            result = await session.execute(query)
            events = list(result.scalars().all())

        return events, total or 0

    async def get_event(self, event_id: int) -> Event:
        """Get event by ID"""
        async with self.database.session() as session:
            event = await session.get(Event, event_id)

        if event is None:
            raise EventNotFoundError(event_id)
        return event

    async def get_cached_event(self, event_id: int) -> Optional[Dict[str, Any]]:
        if not self.cache:
            return None
        return await self.cache.get_event(event_id)

    async def event_cache_version(self, event_id: int) -> int:
        """Read before querying the database; passed back to cache_event"""
        if not self.cache:
            return 0
        return await self.cache.event_version(event_id)

    async def cache_event(self, event_id: int, data: Dict[str, Any], version: int):
        if self.cache:
            await self.cache.set_event(event_id, data, version)

    async def get_cached_event_list(self, page: int, page_size: int) -> Optional[Dict[str, Any]]:
        if not self.cache:
            return None
        return await self.cache.get_event_list(page, page_size)

    async def event_list_cache_version(self) -> int:
        if not self.cache:
            return 0
        return await self.cache.event_list_version()

    async def cache_event_list(self, page: int, page_size: int, data: Dict[str, Any], version: int):
        if self.cache:
            await self.cache.set_event_list(page, page_size, data, version)

    async def update_event(self, event_id: int, changes: Dict[str, Any]) -> Event:
        """
        Partially update an event.

        A change to total_seats shifts available_seats by the same delta
        under the event row lock; shrinking below the seats already held
        by active bookings raises CapacityBelowReservedError. Existing
        bookings keep the amount they were created with.
        """
        async with self.database.transaction() as session:
            event = await session.scalar(
                select(Event).where(Event.id == event_id).with_for_update()
            )
            if event is None:
                raise EventNotFoundError(event_id)

            for field in UPDATABLE_FIELDS:
                if field in changes:
                    setattr(event, field, changes[field])

            new_total = changes.get("total_seats")
            if new_total is not None and new_total != event.total_seats:
                delta = new_total - event.total_seats
                result = await session.execute(
                    update(Event)
                    .where(Event.id == event_id, Event.available_seats + delta >= 0)
                    .values(
                        total_seats=new_total,
                        available_seats=Event.available_seats + delta,
                    )
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    raise CapacityBelowReservedError(event_id, event.reserved_seats, new_total)

            await session.flush()
            await session.refresh(event)

        logger.info(f"Event {event_id} updated", extra={"event_id": event_id})
        await self._invalidate(event_id)
        return event

    async def delete_event(self, event_id: int):
        """Delete an event that no booking references"""
        async with self.database.transaction() as session:
            event = await session.scalar(
                select(Event).where(Event.id == event_id).with_for_update()
            )
            if event is None:
                raise EventNotFoundError(event_id)

            booking_count = await session.scalar(
                select(func.count(Booking.id)).where(Booking.event_id == event_id)
            )
            if booking_count:
                raise EventHasBookingsError(event_id)

            await session.delete(event)

        logger.info(f"Event {event_id} deleted", extra={"event_id": event_id})
        await self._invalidate(event_id)

    async def _invalidate(self, event_id: int):
        if self.cache:
            await self.cache.invalidate_event(event_id)
