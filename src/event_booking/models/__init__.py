"""
SQLAlchemy Models for the Event Booking API

Import all models here for easy access and to ensure proper relationship setup.
"""
from event_booking.core.database import Base

# Import all models to register them with SQLAlchemy
from event_booking.models.user import User, UserRole
from event_booking.models.event import Event
from event_booking.models.booking import Booking, BookingStatus, ACTIVE_STATUSES

# Export all models
__all__ = [
    "Base",
    "User",
    "UserRole",
    "Event",
    "Booking",
    "BookingStatus",
    "ACTIVE_STATUSES",
]
