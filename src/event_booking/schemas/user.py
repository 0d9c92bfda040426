"""Pydantic schemas for User resources"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict

from event_booking.models.user import UserRole


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: UserRole


class UserResponse(UserSummary):
    image: Optional[str] = None
    provider: str
    created_at: datetime
