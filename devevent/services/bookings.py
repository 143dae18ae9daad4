"""
Booking validation and persistence service
"""

import logging
from typing import Any, List, Mapping, Optional

from fastapi.concurrency import run_in_threadpool

from devevent.core.errors import NotFoundError, ReferenceNotFoundError
from devevent.schemas.booking import BookingRecord
from devevent.services.events import new_id, utcnow
from devevent.services.normalization import normalize_email, require_text
from devevent.services.repositories import Database, EventStore

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("event_id", "email")


async def validate_and_link(
    candidate: Mapping[str, Any],
    events: EventStore,
    previous: Optional[BookingRecord] = None,
) -> BookingRecord:
    """Validate a booking candidate and check that its event exists.

    The existence lookup only runs when the reference is new or differs from
    the previously persisted one.
    """
    event_id = require_text("event_id", candidate.get("event_id"))
    email = normalize_email(candidate.get("email"))

    if previous is None or previous.event_id != event_id:
        if not await run_in_threadpool(events.exists, event_id):
            logger.warning("Booking references missing event: %s", event_id)
            raise ReferenceNotFoundError(event_id)

    now = utcnow()
    return BookingRecord(
        id=previous.id if previous else new_id(),
        event_id=event_id,
        email=email,
        created_at=previous.created_at if previous else now,
        updated_at=now,
    )


class BookingService:
    """Service for booking operations"""

    def __init__(self, db: Database):
        self.events = db.events
        self.store = db.bookings

    async def create_booking(self, candidate: Mapping[str, Any]) -> BookingRecord:
        record = await validate_and_link(candidate, self.events)
        saved = await run_in_threadpool(self.store.insert, record)
        logger.info("Booking created: id=%s event_id=%s", saved.id, saved.event_id)
        return saved

    async def update_booking(self, booking_id: str, changes: Mapping[str, Any]) -> BookingRecord:
        previous = await self.get_booking(booking_id)
        merged = previous.model_dump()
        merged.update({k: v for k, v in changes.items() if k in EDITABLE_FIELDS})

        record = await validate_and_link(merged, self.events, previous)
        return await run_in_threadpool(self.store.replace, record)

    async def get_booking(self, booking_id: str) -> BookingRecord:
        booking = await run_in_threadpool(self.store.get, booking_id)
        if booking is None:
            raise NotFoundError("Booking", booking_id)
        return booking

    async def list_bookings_for_event(self, event_id: str) -> List[BookingRecord]:
        return await run_in_threadpool(self.store.list_for_event, event_id)

    async def count_bookings_for_event(self, event_id: str) -> int:
        return await run_in_threadpool(self.store.count_for_event, event_id)
