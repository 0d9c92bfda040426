"""
Pydantic schemas for Event resources
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class EventBase(BaseModel):
    """Base Event schema"""
    title: str = Field(..., min_length=1, max_length=500, description="Event title")
    description: Optional[str] = Field(None, description="Event description")
    date: datetime = Field(..., description="Event date and start time")
    time: Optional[str] = Field(None, max_length=50, description="Display time, e.g. '8:00 PM'")
    venue: str = Field(..., min_length=1, max_length=500, description="Venue name")
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2, description="Price per seat")


class EventCreate(EventBase):
    """Request body for creating an event"""
    total_seats: int = Field(..., ge=0, description="Fixed seat capacity")


class EventUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged"""
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = None
    date: Optional[datetime] = None
    time: Optional[str] = Field(None, max_length=50)
    venue: Optional[str] = Field(None, min_length=1, max_length=500)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    total_seats: Optional[int] = Field(None, ge=0)


class EventResponse(EventBase):
    """Event response schema"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    total_seats: int = Field(..., description="Total number of seats")
    available_seats: int = Field(..., description="Available seats for booking")
    is_sold_out: bool = Field(..., description="Whether event is sold out")
    occupancy_rate: float = Field(..., description="Occupancy percentage")
    created_at: datetime
    updated_at: datetime


class EventSummary(BaseModel):
    """Event fields embedded in booking responses"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    date: datetime
    venue: str
    price: Decimal


class EventListResponse(BaseModel):
    """Response schema for listing events"""
    events: list[EventResponse]
    total: int
    page: int
    page_size: int
