"""
Booking Service - seat inventory and booking status transitions

Every mutating operation runs as one unit of work inside
``Database.transaction()``. The event row is read with ``FOR UPDATE`` and
the seat counter is changed with a conditional UPDATE whose row count is
checked, so concurrent bookings can never drive ``available_seats``
below zero or above ``total_seats``, whether the store serializes
writers with row locks (PostgreSQL) or database locks (SQLite).

A booking gives its seats back exactly once: the first cancel sets
``seats_released`` in the same statement that moves it to CANCELLED.
"""
import asyncio
import time
from functools import partial
from typing import Awaitable, Callable, List, Optional, Tuple, TypeVar

from sqlalchemy import select, update
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from event_booking.core.config import settings
from event_booking.core.database import Database
from event_booking.core.metrics import (
    booking_failures_total,
    booking_transaction_duration_seconds,
    bookings_cancelled_total,
    bookings_confirmed_total,
    bookings_created_total,
    seats_released_total,
    seats_reserved_total,
)
from event_booking.models import Booking, BookingStatus, Event
from event_booking.services.cache_service import CacheService
from event_booking.services.errors import (
    AlreadyCancelledError,
    BookingNotFoundError,
    BookingServiceError,
    BookingTimeoutError,
    EventNotFoundError,
    InsufficientInventoryError,
    InvalidBookingRequestError,
    InventoryOverflowError,
    translate_db_error,
)
import logging

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BookingService:
    """Service for managing bookings against event inventory"""

    def __init__(
        self,
        database: Database,
        cache: Optional[CacheService] = None,
        max_seats_per_booking: int = settings.MAX_SEATS_PER_BOOKING,
        transaction_timeout: float = settings.BOOKING_TRANSACTION_TIMEOUT_SECONDS,
    ):
        self.database = database
        self.cache = cache
        self.max_seats_per_booking = max_seats_per_booking
        self.transaction_timeout = transaction_timeout

    # ==================== Commands ====================

    async def create_booking(self, event_id: int, user_id: int, seat_count: int) -> Booking:
        """
        Reserve ``seat_count`` seats on an event and create a PENDING booking.

        Raises:
            InvalidBookingRequestError: seat_count is not in 1..max_seats_per_booking
            EventNotFoundError: the event does not exist
            InsufficientInventoryError: fewer seats are available than requested
            BookingConflictError / BookingTimeoutError: retryable store failures
        """
        if seat_count <= 0:
            self._count_failure("create_booking", InvalidBookingRequestError.code)
            raise InvalidBookingRequestError("seat_count must be a positive integer")
        if seat_count > self.max_seats_per_booking:
            self._count_failure("create_booking", InvalidBookingRequestError.code)
            raise InvalidBookingRequestError(
                f"Cannot book more than {self.max_seats_per_booking} seats at once"
            )

        booking = await self._run(
            "create_booking",
            partial(self._create_booking, event_id=event_id, user_id=user_id, seat_count=seat_count),
        )

        bookings_created_total.inc()
        seats_reserved_total.inc(seat_count)
        logger.info(
            f"Booking {booking.id} created: {seat_count} seats on event {event_id}",
            extra={
                "booking_id": booking.id,
                "event_id": event_id,
                "user_id": user_id,
                "seat_count": seat_count,
            },
        )
        await self._invalidate(event_id)
        return booking

    async def confirm_booking(self, booking_id: int) -> Booking:
        """
        Mark a booking CONFIRMED.

        The prior status is not checked: a CANCELLED booking can be
        confirmed. Its seats stay released, so it no longer holds
        inventory and a later cancel only changes its status.
        """
        booking = await self._run(
            "confirm_booking", partial(self._confirm_booking, booking_id=booking_id)
        )

        bookings_confirmed_total.inc()
        logger.info(
            f"Booking {booking_id} confirmed",
            extra={"booking_id": booking_id, "event_id": booking.event_id},
        )
        return booking

    async def cancel_booking(self, booking_id: int) -> Booking:
        """
        Cancel a booking and return its seats to the event.

        Seats are restored only by the first cancel of a booking; cancelling
        a booking that was confirmed after being cancelled leaves inventory
        untouched.

        Raises:
            BookingNotFoundError: the booking does not exist
            AlreadyCancelledError: the booking is already CANCELLED
            InventoryOverflowError: restoring the seats would exceed total_seats
        """
        booking, restored = await self._run(
            "cancel_booking", partial(self._cancel_booking, booking_id=booking_id)
        )

        bookings_cancelled_total.inc()
        if restored:
            seats_released_total.inc(booking.seat_count)
        logger.info(
            f"Booking {booking_id} cancelled, "
            f"{booking.seat_count if restored else 0} seats restored",
            extra={
                "booking_id": booking_id,
                "event_id": booking.event_id,
                "seat_count": booking.seat_count,
            },
        )
        await self._invalidate(booking.event_id)
        return booking

    # ==================== Queries ====================

    async def list_bookings(self, status: Optional[BookingStatus] = None) -> List[Booking]:
        """All bookings with their event and user"""
        query = (
            select(Booking)
            .options(selectinload(Booking.event), selectinload(Booking.user))
            .order_by(Booking.created_at.desc(), Booking.id.desc())
        )
        if status:
            query = query.where(Booking.status == status)

        async with self.database.session() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def list_user_bookings(
        self,
        user_id: int,
        status: Optional[BookingStatus] = None,
    ) -> List[Booking]:
        """Bookings owned by one user, newest first"""
        query = (
            select(Booking)
            .where(Booking.user_id == user_id)
            .options(selectinload(Booking.event))
            .order_by(Booking.created_at.desc(), Booking.id.desc())
        )
        if status:
            query = query.where(Booking.status == status)

        async with self.database.session() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def get_booking(self, booking_id: int) -> Booking:
        """Get a booking with its event and user loaded"""
        async with self.database.session() as session:
            booking = await self._load_booking(session, booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        return booking

    # ==================== Units of work ====================

    async def _create_booking(
        self,
        session: AsyncSession,
        event_id: int,
        user_id: int,
        seat_count: int,
    ) -> Booking:
        # 1. Lock the event row
        event = await session.scalar(
            select(Event).where(Event.id == event_id).with_for_update()
        )
        if event is None:
            raise EventNotFoundError(event_id)

        # 2. Check availability
        if event.available_seats < seat_count:
            raise InsufficientInventoryError(event_id, seat_count, event.available_seats)

        # 3. Decrement only if still sufficient
        result = await session.execute(
            update(Event)
            .where(Event.id == event_id, Event.available_seats >= seat_count)
            .values(available_seats=Event.available_seats - seat_count)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            remaining = await session.scalar(
                select(Event.available_seats).where(Event.id == event_id)
            )
            raise InsufficientInventoryError(event_id, seat_count, remaining or 0)

        await session.refresh(event)

        # 4. Create booking with the amount frozen at today's price
        booking = Booking(
            event_id=event_id,
            user_id=user_id,
            seat_count=seat_count,
            amount=event.price * seat_count,
            status=BookingStatus.PENDING,
            seats_released=False,
        )
        session.add(booking)
        await session.flush()

        return await self._load_booking(session, booking.id)

    async def _confirm_booking(self, session: AsyncSession, booking_id: int) -> Booking:
        booking = await session.get(Booking, booking_id, with_for_update=True)
        if booking is None:
            raise BookingNotFoundError(booking_id)

        if booking.status == BookingStatus.CANCELLED:
            logger.warning(
                f"Confirming cancelled booking {booking_id}; its seats are not re-reserved",
                extra={"booking_id": booking_id, "event_id": booking.event_id},
            )

        booking.status = BookingStatus.CONFIRMED
        await session.flush()

        return await self._load_booking(session, booking_id)

    async def _cancel_booking(
        self,
        session: AsyncSession,
        booking_id: int,
    ) -> Tuple[Booking, bool]:
        # 1. Lock the booking row
        booking = await session.scalar(
            select(Booking).where(Booking.id == booking_id).with_for_update()
        )
        if booking is None:
            raise BookingNotFoundError(booking_id)
        if booking.status == BookingStatus.CANCELLED:
            raise AlreadyCancelledError(booking_id)

        # 2. First cancel: move to CANCELLED and claim the seat release together
        result = await session.execute(
            update(Booking)
            .where(
                Booking.id == booking_id,
                Booking.status != BookingStatus.CANCELLED,
                Booking.seats_released.is_(False),
            )
            .values(status=BookingStatus.CANCELLED, seats_released=True)
            .execution_options(synchronize_session=False)
        )
        restored = result.rowcount == 1

        if not restored:
            # Seats went back on an earlier cancel; only the status changes
            result = await session.execute(
                update(Booking)
                .where(Booking.id == booking_id, Booking.status != BookingStatus.CANCELLED)
                .values(status=BookingStatus.CANCELLED)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise AlreadyCancelledError(booking_id)

        # 3. Restore seats without exceeding capacity
        if restored:
            seat_count = booking.seat_count
            result = await session.execute(
                update(Event)
                .where(
                    Event.id == booking.event_id,
                    Event.available_seats + seat_count <= Event.total_seats,
                )
                .values(available_seats=Event.available_seats + seat_count)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise InventoryOverflowError(booking.event_id, seat_count)

        return await self._load_booking(session, booking_id), restored

    # ==================== Helpers ====================

    @staticmethod
    async def _load_booking(session: AsyncSession, booking_id: int) -> Optional[Booking]:
        query = (
            select(Booking)
            .where(Booking.id == booking_id)
            .options(selectinload(Booking.event), selectinload(Booking.user))
            .execution_options(populate_existing=True)
        )
        return await session.scalar(query)

    async def _run(self, operation: str, unit_of_work: Callable[[AsyncSession], Awaitable[T]]) -> T:
        """
        Run a unit of work in one transaction, translating store contention
        into typed errors and recording metrics.

        The time bound covers the statements of the unit of work. The commit
        happens after it, so work that reached the commit is never reported
        as a timeout.
        """
        start = time.perf_counter()
        try:
            try:
                async with self.database.transaction() as session:
                    try:
                        return await asyncio.wait_for(
                            unit_of_work(session), timeout=self.transaction_timeout
                        )
                    except asyncio.TimeoutError as e:
                        raise BookingTimeoutError(
                            f"{operation} exceeded {self.transaction_timeout}s; retry"
                        ) from e
            except DBAPIError as e:
                translated = translate_db_error(e, operation)
                if translated is None:
                    raise
                raise translated from e
        except BookingServiceError as e:
            self._count_failure(operation, e.code)
            logger.warning(f"{operation} rejected: {e.message}", extra={"error_code": e.code})
            raise
        finally:
            booking_transaction_duration_seconds.labels(operation=operation).observe(
                time.perf_counter() - start
            )

    @staticmethod
    def _count_failure(operation: str, code: str):
        booking_failures_total.labels(operation=operation, code=code).inc()

    async def _invalidate(self, event_id: int):
        if self.cache:
            await self.cache.invalidate_event(event_id)
