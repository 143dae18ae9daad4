"""
Event-related Pydantic schemas
"""

from datetime import datetime, timezone
from typing import Any, List
from pydantic import BaseModel, ConfigDict, field_validator


class EventRecord(BaseModel):
    """Normalized event as it is persisted"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    slug: str
    description: str
    overview: str
    image: str
    venue: str
    location: str
    date: str
    time: str
    mode: str
    audience: str
    agenda: List[str]
    organizer: str
    tags: List[str]
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # SQLite hands back naive datetimes
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class EventCreate(BaseModel):
    """Schema for creating an event

    Field rules are enforced by the event validator, so values are accepted
    loosely here and rejected with a field-specific message there.
    """
    title: Any = None
    description: Any = None
    overview: Any = None
    image: Any = None
    venue: Any = None
    location: Any = None
    date: Any = None
    time: Any = None
    mode: Any = None
    audience: Any = None
    agenda: Any = None
    organizer: Any = None
    tags: Any = None


class EventUpdate(EventCreate):
    """Schema for updating an event; only fields that are sent are changed"""


class EventDetail(EventRecord):
    """Event with its booking count"""
    bookings_count: int
