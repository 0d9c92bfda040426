"""
Services package exports
"""
from event_booking.services.errors import (
    BookingServiceError,
    NotFoundError,
    EventNotFoundError,
    BookingNotFoundError,
    InvalidBookingRequestError,
    InsufficientInventoryError,
    CapacityBelowReservedError,
    AlreadyCancelledError,
    InventoryOverflowError,
    EventHasBookingsError,
    BookingConflictError,
    BookingTimeoutError,
)
from event_booking.services.booking_service import BookingService
from event_booking.services.cache_service import CacheService
from event_booking.services.event_service import EventService
from event_booking.services.user_service import UserService
from event_booking.services.oauth_client import GoogleOAuthClient, OAuthError, OAuthProfile

__all__ = [
    "BookingService",
    "BookingServiceError",
    "NotFoundError",
    "EventNotFoundError",
    "BookingNotFoundError",
    "InvalidBookingRequestError",
    "InsufficientInventoryError",
    "CapacityBelowReservedError",
    "AlreadyCancelledError",
    "InventoryOverflowError",
    "EventHasBookingsError",
    "BookingConflictError",
    "BookingTimeoutError",
    "CacheService",
    "EventService",
    "UserService",
    "GoogleOAuthClient",
    "OAuthError",
    "OAuthProfile",
]
