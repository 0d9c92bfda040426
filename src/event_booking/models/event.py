"""
Event model for managing ticketed events
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, Numeric, CheckConstraint
from sqlalchemy.orm import relationship

from event_booking.core.database import Base


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("available_seats >= 0", name="ck_events_available_non_negative"),
        CheckConstraint("available_seats <= total_seats", name="ck_events_available_within_total"),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(500), nullable=False)
    description = Column(Text)
    date = Column(DateTime, nullable=False, index=True)
    time = Column(String(50))  # display time, e.g. '8:00 PM'
    venue = Column(String(500), nullable=False)
    total_seats = Column(Integer, nullable=False)
    available_seats = Column(Integer, nullable=False)  # only changed inside booking transactions
    price = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    bookings = relationship("Booking", back_populates="event")

    def __repr__(self):
        return f"<Event(id={self.id}, title='{self.title}', venue='{self.venue}', date='{self.date}')>"

    @property
    def is_sold_out(self) -> bool:
        """Check if event is sold out"""
        return self.available_seats <= 0

    @property
    def reserved_seats(self) -> int:
        return self.total_seats - self.available_seats

    @property
    def occupancy_rate(self) -> float:
        """Calculate current occupancy percentage"""
        if self.total_seats == 0:
            return 0.0
        return (self.reserved_seats / self.total_seats) * 100
