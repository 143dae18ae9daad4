"""
Booking-related Pydantic schemas
"""

from datetime import datetime, timezone
from typing import Any
from pydantic import BaseModel, ConfigDict, field_validator


class BookingRecord(BaseModel):
    """Normalized booking as it is persisted"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    event_id: str
    email: str
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class BookingCreate(BaseModel):
    """Schema for booking an event"""
    event_id: Any = None
    email: Any = None


class BookingUpdate(BookingCreate):
    """Schema for changing a booking; only fields that are sent are changed"""
