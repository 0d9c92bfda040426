"""Pydantic schemas for Booking resources"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from event_booking.models.booking import BookingStatus
from event_booking.schemas.event import EventSummary
from event_booking.schemas.user import UserSummary


class BookingCreate(BaseModel):
    event_id: int = Field(..., gt=0)
    seat_count: int = Field(..., description="Number of seats to reserve")


class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    user_id: int
    seat_count: int
    amount: Decimal
    status: BookingStatus
    seats_released: bool = False
    created_at: datetime
    updated_at: datetime
    event: Optional[EventSummary] = None
    user: Optional[UserSummary] = None

    @classmethod
    def from_booking(cls, booking, include_user: bool = True):
        """Convert Booking ORM model to response, using only loaded relationships"""
        loaded = booking.__dict__
        return cls(
            id=booking.id,
            event_id=booking.event_id,
            user_id=booking.user_id,
            seat_count=booking.seat_count,
            amount=booking.amount,
            status=booking.status,
            seats_released=booking.seats_released,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
            event=EventSummary.model_validate(loaded["event"]) if loaded.get("event") else None,
            user=(
                UserSummary.model_validate(loaded["user"])
                if include_user and loaded.get("user")
                else None
            ),
        )


class BookingEnvelope(BaseModel):
    success: bool = True
    message: str
    booking: BookingResponse


class BookingListResponse(BaseModel):
    success: bool = True
    bookings: List[BookingResponse]
    total: int
