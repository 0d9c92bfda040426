"""
Typed failures raised by the booking and event services

Each error carries a stable ``code`` and the HTTP status the API layer
maps it to.
"""
from typing import Optional

from sqlalchemy.exc import DBAPIError


class BookingServiceError(Exception):
    """Base exception for booking service errors"""

    code = "BOOKING_ERROR"
    status_code = 400
    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(BookingServiceError):
    """Referenced event or booking does not exist"""

    code = "NOT_FOUND"
    status_code = 404


class EventNotFoundError(NotFoundError):
    """Raised when event doesn't exist"""

    def __init__(self, event_id: int):
        super().__init__(f"Event {event_id} not found")
        self.event_id = event_id


class BookingNotFoundError(NotFoundError):
    """Raised when booking doesn't exist"""

    def __init__(self, booking_id: int):
        super().__init__(f"Booking {booking_id} not found")
        self.booking_id = booking_id


class InvalidBookingRequestError(BookingServiceError):
    """Request violates a precondition (e.g. non-positive seat count)"""

    code = "INVALID_REQUEST"
    status_code = 400


class InsufficientInventoryError(BookingServiceError):
    """Requested seats exceed what the event has left"""

    code = "INSUFFICIENT_INVENTORY"
    status_code = 409

    def __init__(self, event_id: int, requested: int, available: int):
        super().__init__(
            f"Not enough seats available for event {event_id}: "
            f"requested {requested}, available {available}"
        )
        self.event_id = event_id
        self.requested = requested
        self.available = available


class CapacityBelowReservedError(InsufficientInventoryError):
    """Capacity change would leave fewer seats than bookings already hold"""

    def __init__(self, event_id: int, reserved: int, new_total: int):
        BookingServiceError.__init__(
            self,
            f"Cannot reduce capacity of event {event_id} to {new_total}: "
            f"{reserved} seats are held by bookings",
        )
        self.event_id = event_id
        self.reserved = reserved
        self.new_total = new_total


class AlreadyCancelledError(BookingServiceError):
    """Cancel requested on a booking that is already CANCELLED"""

    code = "ALREADY_CANCELLED"
    status_code = 409

    def __init__(self, booking_id: int):
        super().__init__(f"Booking {booking_id} already cancelled")
        self.booking_id = booking_id


class InventoryOverflowError(BookingServiceError):
    """Restoring seats would push available_seats above total_seats"""

    code = "INVENTORY_OVERFLOW"
    status_code = 409

    def __init__(self, event_id: int, seat_count: int):
        super().__init__(
            f"Restoring {seat_count} seats would exceed the capacity of event {event_id}"
        )
        self.event_id = event_id
        self.seat_count = seat_count


class EventHasBookingsError(BookingServiceError):
    """Event cannot be deleted while bookings reference it"""

    code = "EVENT_HAS_BOOKINGS"
    status_code = 409

    def __init__(self, event_id: int):
        super().__init__(f"Event {event_id} has bookings and cannot be deleted")
        self.event_id = event_id


class BookingConflictError(BookingServiceError):
    """Unit of work could not commit because of concurrent modification"""

    code = "CONFLICT"
    status_code = 503
    retryable = True


class BookingTimeoutError(BookingServiceError):
    """Unit of work exceeded its time bound"""

    code = "TIMEOUT"
    status_code = 503
    retryable = True


# SQLSTATEs raised by PostgreSQL under contention
SERIALIZATION_FAILURE = "40001"
DEADLOCK_DETECTED = "40P01"
LOCK_NOT_AVAILABLE = "55P03"
QUERY_CANCELED = "57014"


def _sqlstate(exc: DBAPIError):
    orig = exc.orig
    for attr in ("sqlstate", "pgcode"):
        value = getattr(orig, attr, None)
        if value:
            return value
    # asyncpg errors arrive wrapped by the SQLAlchemy adapter
    cause = getattr(orig, "__cause__", None)
    return getattr(cause, "sqlstate", None)


def translate_db_error(exc: DBAPIError, operation: str) -> Optional[BookingServiceError]:
    """
    Map store-level contention to Conflict/Timeout.

    Returns None for errors that are not contention related; callers
    re-raise those unchanged.
    """
    state = _sqlstate(exc)
    if state in (SERIALIZATION_FAILURE, DEADLOCK_DETECTED):
        return BookingConflictError(
            f"{operation} could not commit due to a concurrent modification; retry"
        )
    if state in (LOCK_NOT_AVAILABLE, QUERY_CANCELED):
        return BookingTimeoutError(f"{operation} timed out waiting for a lock; retry")
    if "database is locked" in str(exc.orig):
        return BookingConflictError(
            f"{operation} could not commit due to a concurrent modification; retry"
        )
    return None
