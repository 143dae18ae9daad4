"""
Repository layer abstracting storage (SQLAlchemy vs Firebase Firestore).

Stores are synchronous and return the pydantic records from devevent.schemas;
the async services run them in the thread pool.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from itertools import islice
from typing import Any, Callable, Dict, List, Optional

from firebase_admin import firestore
from google.api_core.exceptions import Conflict
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from devevent.core.db import Base, create_session_factory, create_sql_engine
from devevent.core.errors import ConflictError
from devevent.models import Booking, Event
from devevent.schemas.booking import BookingRecord
from devevent.schemas.event import EventRecord
from devevent.services.firebase_client import get_firestore_client

logger = logging.getLogger(__name__)


# -------- Interfaces --------

class EventStore(ABC):
    """Interface for event persistence operations."""

    @abstractmethod
    def insert(self, record: EventRecord) -> EventRecord:
        """Persist a new event. Raises ConflictError if the slug is taken."""
        ...

    @abstractmethod
    def replace(self, record: EventRecord, previous_slug: str) -> EventRecord:
        """Overwrite an existing event. Raises ConflictError if a new slug is taken."""
        ...

    @abstractmethod
    def get(self, event_id: str) -> Optional[EventRecord]:
        ...

    @abstractmethod
    def get_by_slug(self, slug: str) -> Optional[EventRecord]:
        ...

    @abstractmethod
    def exists(self, event_id: str) -> bool:
        ...

    @abstractmethod
    def list(
        self,
        tag: Optional[str] = None,
        mode: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[EventRecord]:
        """Return events ordered by created_at descending."""
        ...

    @abstractmethod
    def delete(self, event_id: str) -> bool:
        """Remove an event. Bookings that reference it are left in place."""
        ...


class BookingStore(ABC):
    """Interface for booking persistence operations."""

    @abstractmethod
    def insert(self, record: BookingRecord) -> BookingRecord:
        ...

    @abstractmethod
    def replace(self, record: BookingRecord) -> BookingRecord:
        ...

    @abstractmethod
    def get(self, booking_id: str) -> Optional[BookingRecord]:
        ...

    @abstractmethod
    def list_for_event(self, event_id: str) -> List[BookingRecord]:
        """Return bookings for an event ordered by created_at ascending."""
        ...

    @abstractmethod
    def count_for_event(self, event_id: str) -> int:
        ...


class Database:
    """Connection handle exposing the event and booking stores as one lookup surface."""

    def __init__(
        self,
        events: EventStore,
        bookings: BookingStore,
        dispose: Optional[Callable[[], None]] = None,
    ) -> None:
        self.events = events
        self.bookings = bookings
        self._dispose = dispose

    def close(self) -> None:
        if self._dispose is not None:
            self._dispose()


# -------- SQLAlchemy stores --------

class SqlEventStore(EventStore):
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def insert(self, record: EventRecord) -> EventRecord:
        with self._session_factory() as db:
            db.add(Event(**record.model_dump()))
            self._commit(db, record.slug)
        return record

    def replace(self, record: EventRecord, previous_slug: str) -> EventRecord:
        with self._session_factory() as db:
            event = db.get(Event, record.id)
            if event is None:
                db.add(Event(**record.model_dump()))
            else:
                for key, value in record.model_dump(exclude={"id"}).items():
                    setattr(event, key, value)
            self._commit(db, record.slug)
        return record

    @staticmethod
    def _commit(db, slug: str) -> None:
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            logger.warning("Slug conflict on event write: %s", slug)
            raise ConflictError("slug", slug) from exc

    def get(self, event_id: str) -> Optional[EventRecord]:
        with self._session_factory() as db:
            event = db.get(Event, event_id)
            return EventRecord.model_validate(event) if event else None

    def get_by_slug(self, slug: str) -> Optional[EventRecord]:
        with self._session_factory() as db:
            event = db.execute(select(Event).where(Event.slug == slug)).scalar_one_or_none()
            return EventRecord.model_validate(event) if event else None

    def exists(self, event_id: str) -> bool:
        with self._session_factory() as db:
            return db.execute(select(Event.id).where(Event.id == event_id)).first() is not None

    def list(self, tag=None, mode=None, limit=50, offset=0) -> List[EventRecord]:
        with self._session_factory() as db:
            query = select(Event).order_by(Event.created_at.desc(), Event.id)
            if mode:
                query = query.where(Event.mode == mode)
            if tag:
                # JSON containment is not portable across dialects, so tags are filtered while streaming
                rows = db.execute(query.execution_options(yield_per=100)).scalars()
                matches = (e for e in rows if tag in (e.tags or []))
                events = list(islice(matches, offset, offset + limit))
            else:
                events = db.execute(query.offset(offset).limit(limit)).scalars().all()
            return [EventRecord.model_validate(e) for e in events]

    def delete(self, event_id: str) -> bool:
        with self._session_factory() as db:
            event = db.get(Event, event_id)
            if event is None:
                return False
            db.delete(event)
            db.commit()
            return True


class SqlBookingStore(BookingStore):
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def insert(self, record: BookingRecord) -> BookingRecord:
        with self._session_factory() as db:
            db.add(Booking(**record.model_dump()))
            db.commit()
        return record

    def replace(self, record: BookingRecord) -> BookingRecord:
        with self._session_factory() as db:
            booking = db.get(Booking, record.id)
            if booking is None:
                db.add(Booking(**record.model_dump()))
            else:
                for key, value in record.model_dump(exclude={"id"}).items():
                    setattr(booking, key, value)
            db.commit()
        return record

    def get(self, booking_id: str) -> Optional[BookingRecord]:
        with self._session_factory() as db:
            booking = db.get(Booking, booking_id)
            return BookingRecord.model_validate(booking) if booking else None

    def list_for_event(self, event_id: str) -> List[BookingRecord]:
        with self._session_factory() as db:
            query = (
                select(Booking)
                .where(Booking.event_id == event_id)
                .order_by(Booking.created_at, Booking.id)
            )
            return [BookingRecord.model_validate(b) for b in db.execute(query).scalars()]

    def count_for_event(self, event_id: str) -> int:
        with self._session_factory() as db:
            query = select(func.count()).select_from(Booking).where(Booking.event_id == event_id)
            return db.execute(query).scalar_one()


def open_sql_database(database_url: str) -> Database:
    """Connect to a SQL database, creating the tables and indexes if needed."""
    engine = create_sql_engine(database_url)
    Base.metadata.create_all(bind=engine)
    session_factory = create_session_factory(engine)
    return Database(
        events=SqlEventStore(session_factory),
        bookings=SqlBookingStore(session_factory),
        dispose=engine.dispose,
    )


# -------- Firestore stores --------
# Collections: "events/{id}", "bookings/{id}" and "event_slugs/{slug}".
# Firestore has no unique indexes; a slug is claimed by creating its
# event_slugs document in the same batch as the event write.

EVENTS = "events"
BOOKINGS = "bookings"
EVENT_SLUGS = "event_slugs"


def _record_data(record) -> Dict[str, Any]:
    return record.model_dump(exclude={"id"})


def _from_doc(model, doc):
    data = doc.to_dict()
    data["id"] = doc.id
    return model.model_validate(data)


class FirestoreEventStore(EventStore):
    def __init__(self, client) -> None:
        self._client = client

    def _events(self):
        return self._client.collection(EVENTS)

    def _slugs(self):
        return self._client.collection(EVENT_SLUGS)

    def insert(self, record: EventRecord) -> EventRecord:
        batch = self._client.batch()
        batch.create(self._slugs().document(record.slug), {"event_id": record.id})
        batch.set(self._events().document(record.id), _record_data(record))
        self._commit(batch, record.slug)
        return record

    def replace(self, record: EventRecord, previous_slug: str) -> EventRecord:
        batch = self._client.batch()
        if record.slug != previous_slug:
            batch.create(self._slugs().document(record.slug), {"event_id": record.id})
            batch.delete(self._slugs().document(previous_slug))
        batch.set(self._events().document(record.id), _record_data(record))
        self._commit(batch, record.slug)
        return record

    @staticmethod
    def _commit(batch, slug: str) -> None:
        try:
            batch.commit()
        except Conflict as exc:
            logger.warning("Slug conflict on event write: %s", slug)
            raise ConflictError("slug", slug) from exc

    def get(self, event_id: str) -> Optional[EventRecord]:
        doc = self._events().document(event_id).get()
        return _from_doc(EventRecord, doc) if doc.exists else None

    def get_by_slug(self, slug: str) -> Optional[EventRecord]:
        docs = self._events().where("slug", "==", slug).limit(1).get()
        return _from_doc(EventRecord, docs[0]) if docs else None

    def exists(self, event_id: str) -> bool:
        return self._events().document(event_id).get().exists

    def list(self, tag=None, mode=None, limit=50, offset=0) -> List[EventRecord]:
        query = self._events()
        if mode:
            query = query.where("mode", "==", mode)
        if tag:
            query = query.where("tags", "array_contains", tag)
        query = query.order_by("created_at", direction=firestore.Query.DESCENDING)
        docs = query.offset(offset).limit(limit).get()
        return [_from_doc(EventRecord, d) for d in docs]

    def delete(self, event_id: str) -> bool:
        ref = self._events().document(event_id)
        doc = ref.get()
        if not doc.exists:
            return False
        batch = self._client.batch()
        batch.delete(ref)
        batch.delete(self._slugs().document(doc.to_dict()["slug"]))
        batch.commit()
        return True


class FirestoreBookingStore(BookingStore):
    def __init__(self, client) -> None:
        self._client = client

    def _bookings(self):
        return self._client.collection(BOOKINGS)

    def insert(self, record: BookingRecord) -> BookingRecord:
        self._bookings().document(record.id).set(_record_data(record))
        return record

    def replace(self, record: BookingRecord) -> BookingRecord:
        self._bookings().document(record.id).set(_record_data(record))
        return record

    def get(self, booking_id: str) -> Optional[BookingRecord]:
        doc = self._bookings().document(booking_id).get()
        return _from_doc(BookingRecord, doc) if doc.exists else None

    def list_for_event(self, event_id: str) -> List[BookingRecord]:
        docs = self._bookings().where("event_id", "==", event_id).order_by("created_at").get()
        return [_from_doc(BookingRecord, d) for d in docs]

    def count_for_event(self, event_id: str) -> int:
        results = self._bookings().where("event_id", "==", event_id).count().get()
        return int(results[0][0].value)


def open_firestore_database() -> Database:
    """Build the Firestore client and issue one read so a bad project or credential fails now."""
    client = get_firestore_client()
    client.collection(EVENT_SLUGS).limit(1).get()
    return Database(
        events=FirestoreEventStore(client),
        bookings=FirestoreBookingStore(client),
    )
