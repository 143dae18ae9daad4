"""
Event validation and persistence service
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from fastapi.concurrency import run_in_threadpool

from devevent.core.errors import NotFoundError, ValidationError
from devevent.schemas.event import EventRecord
from devevent.services.normalization import (
    normalize_date,
    normalize_time,
    require_text,
    require_text_list,
    slugify,
)
from devevent.services.repositories import Database

logger = logging.getLogger(__name__)

TEXT_FIELDS = (
    "title",
    "description",
    "overview",
    "image",
    "venue",
    "location",
    "mode",
    "audience",
    "organizer",
)
LIST_FIELDS = ("agenda", "tags")
EDITABLE_FIELDS = TEXT_FIELDS + LIST_FIELDS + ("date", "time")


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_and_validate(
    candidate: Mapping[str, Any],
    previous: Optional[EventRecord] = None,
) -> EventRecord:
    """Validate an event candidate and return the normalized record to persist.

    The slug is derived from the title only when there is no previous record
    or the title changed. Date and time are normalized on every call.
    """
    data = {field: require_text(field, candidate.get(field)) for field in TEXT_FIELDS}
    for field in LIST_FIELDS:
        data[field] = require_text_list(field, candidate.get(field))

    if previous is None or data["title"] != previous.title:
        slug = slugify(data["title"])
        if not slug:
            raise ValidationError("title", "title must contain at least one letter or digit.")
    else:
        slug = previous.slug

    data["date"] = normalize_date(candidate.get("date"))
    data["time"] = normalize_time(candidate.get("time"))

    now = utcnow()
    return EventRecord(
        id=previous.id if previous else new_id(),
        slug=slug,
        created_at=previous.created_at if previous else now,
        updated_at=now,
        **data,
    )


class EventService:
    """Service for event operations"""

    def __init__(self, db: Database):
        self.store = db.events

    async def create_event(self, candidate: Mapping[str, Any]) -> EventRecord:
        record = normalize_and_validate(candidate)
        saved = await run_in_threadpool(self.store.insert, record)
        logger.info("Event created: id=%s slug=%s", saved.id, saved.slug)
        return saved

    async def update_event(self, event_id: str, changes: Mapping[str, Any]) -> EventRecord:
        previous = await self.get_event(event_id)
        merged = previous.model_dump()
        merged.update({k: v for k, v in changes.items() if k in EDITABLE_FIELDS})

        record = normalize_and_validate(merged, previous)
        saved = await run_in_threadpool(self.store.replace, record, previous.slug)
        logger.info("Event updated: id=%s slug=%s", saved.id, saved.slug)
        return saved

    async def get_event(self, event_id: str) -> EventRecord:
        event = await run_in_threadpool(self.store.get, event_id)
        if event is None:
            raise NotFoundError("Event", event_id)
        return event

    async def get_event_by_slug(self, slug: str) -> EventRecord:
        event = await run_in_threadpool(self.store.get_by_slug, slug)
        if event is None:
            raise NotFoundError("Event", slug)
        return event

    async def list_events(
        self,
        tag: Optional[str] = None,
        mode: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[EventRecord]:
        return await run_in_threadpool(
            self.store.list, tag=tag, mode=mode, limit=limit, offset=offset
        )
