"""
Pydantic schemas for API request/response validation
"""
from event_booking.schemas.event import (
    EventBase,
    EventCreate,
    EventUpdate,
    EventResponse,
    EventSummary,
    EventListResponse,
)
from event_booking.schemas.user import UserSummary, UserResponse
from event_booking.schemas.booking import (
    BookingCreate,
    BookingResponse,
    BookingEnvelope,
    BookingListResponse,
)

__all__ = [
    # Events
    "EventBase",
    "EventCreate",
    "EventUpdate",
    "EventResponse",
    "EventSummary",
    "EventListResponse",
    # Users
    "UserSummary",
    "UserResponse",
    # Bookings
    "BookingCreate",
    "BookingResponse",
    "BookingEnvelope",
    "BookingListResponse",
]
