"""
Booking model - a user's claim on a number of seats for an event
"""
from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import Boolean, Column, Integer, DateTime, Numeric, ForeignKey, Enum, CheckConstraint
from sqlalchemy.orm import relationship

from event_booking.core.database import Base


class BookingStatus(PyEnum):
    """Enum for booking status"""
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


ACTIVE_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("seat_count > 0", name="ck_bookings_seat_count_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    seat_count = Column(Integer, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)  # frozen at creation
    status = Column(Enum(BookingStatus), nullable=False, default=BookingStatus.PENDING, index=True)
    seats_released = Column(Boolean, nullable=False, default=False)  # set once by the first cancel
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="bookings")
    event = relationship("Event", back_populates="bookings")

    def __repr__(self):
        return (f"<Booking(id={self.id}, user_id={self.user_id}, event_id={self.event_id}, "
                f"seats={self.seat_count}, status='{self.status.value}', amount=${self.amount})>")

    @property
    def is_active(self) -> bool:
        """PENDING and CONFIRMED bookings hold seats until their first cancel"""
        return self.status in ACTIVE_STATUSES and not self.seats_released
