"""
Tests for booking validation and the event reference check
"""

import asyncio
from unittest.mock import MagicMock

import pytest

from devevent.core.errors import NotFoundError, ReferenceNotFoundError, ValidationError
from devevent.services.bookings import BookingService, validate_and_link
from devevent.services.events import EventService
from devevent.services.repositories import EventStore


@pytest.fixture
def event(database, event_payload):
    """A persisted event to book"""
    return asyncio.run(EventService(database).create_event(event_payload))


def test_create_booking_normalizes_email(database, event):
    """Test booking an existing event"""
    service = BookingService(database)

    booking = asyncio.run(service.create_booking({"event_id": event.id, "email": "  A@B.COM "}))

    assert booking.email == "a@b.com"
    assert booking.event_id == event.id
    assert asyncio.run(service.get_booking(booking.id)) == booking


def test_create_booking_for_missing_event_fails(database):
    service = BookingService(database)

    with pytest.raises(ReferenceNotFoundError) as exc_info:
        asyncio.run(service.create_booking({"event_id": "does-not-exist", "email": "a@b.com"}))

    assert exc_info.value.event_id == "does-not-exist"
    assert exc_info.value.field == "event_id"
    assert asyncio.run(service.count_bookings_for_event("does-not-exist")) == 0


def test_reference_not_found_is_a_validation_error():
    assert issubclass(ReferenceNotFoundError, ValidationError)


def test_invalid_email_fails_before_event_lookup():
    """Shape validation runs before the existence check"""
    events = MagicMock(spec=EventStore)

    with pytest.raises(ValidationError) as exc_info:
        asyncio.run(validate_and_link({"event_id": "evt1", "email": "not-an-email"}, events))

    assert exc_info.value.field == "email"
    events.exists.assert_not_called()


def test_missing_event_id_is_a_validation_error():
    events = MagicMock(spec=EventStore)

    with pytest.raises(ValidationError) as exc_info:
        asyncio.run(validate_and_link({"email": "a@b.com"}, events))

    assert exc_info.value.field == "event_id"
    assert not isinstance(exc_info.value, ReferenceNotFoundError)


def test_unchanged_reference_skips_lookup():
    events = MagicMock(spec=EventStore)
    events.exists.return_value = True
    first = asyncio.run(validate_and_link({"event_id": "evt1", "email": "a@b.com"}, events))
    events.exists.reset_mock()

    second = asyncio.run(
        validate_and_link({"event_id": "evt1", "email": "c@d.com"}, events, previous=first)
    )

    events.exists.assert_not_called()
    assert second.id == first.id
    assert second.email == "c@d.com"
    assert second.created_at == first.created_at


def test_changed_reference_is_checked():
    events = MagicMock(spec=EventStore)
    events.exists.return_value = True
    first = asyncio.run(validate_and_link({"event_id": "evt1", "email": "a@b.com"}, events))
    events.exists.return_value = False

    with pytest.raises(ReferenceNotFoundError):
        asyncio.run(validate_and_link({"event_id": "evt2", "email": "a@b.com"}, events, previous=first))

    events.exists.assert_called_with("evt2")


def test_update_after_event_deleted_still_succeeds(database, event):
    """Re-saving without changing the reference does not re-check the event"""
    service = BookingService(database)
    booking = asyncio.run(service.create_booking({"event_id": event.id, "email": "a@b.com"}))
    assert database.events.delete(event.id) is True

    updated = asyncio.run(service.update_booking(booking.id, {"email": "New@Example.com"}))

    assert updated.email == "new@example.com"
    assert updated.event_id == event.id
    assert asyncio.run(service.get_booking(booking.id)).email == "new@example.com"


def test_update_to_missing_event_fails(database, event):
    service = BookingService(database)
    booking = asyncio.run(service.create_booking({"event_id": event.id, "email": "a@b.com"}))

    with pytest.raises(ReferenceNotFoundError):
        asyncio.run(service.update_booking(booking.id, {"event_id": "missing"}))

    assert asyncio.run(service.get_booking(booking.id)).event_id == event.id


def test_update_to_another_event(database, event, event_payload):
    other = asyncio.run(EventService(database).create_event({**event_payload, "title": "Vue Conf"}))
    service = BookingService(database)
    booking = asyncio.run(service.create_booking({"event_id": event.id, "email": "a@b.com"}))

    updated = asyncio.run(service.update_booking(booking.id, {"event_id": other.id}))

    assert updated.event_id == other.id
    assert asyncio.run(service.count_bookings_for_event(event.id)) == 0
    assert asyncio.run(service.count_bookings_for_event(other.id)) == 1


def test_update_missing_booking_raises_not_found(database):
    with pytest.raises(NotFoundError):
        asyncio.run(BookingService(database).update_booking("missing", {"email": "a@b.com"}))


def test_list_and_count_bookings_for_event(database, event):
    service = BookingService(database)
    for email in ["a@b.com", "c@d.com", "e@f.com"]:
        asyncio.run(service.create_booking({"event_id": event.id, "email": email}))

    bookings = asyncio.run(service.list_bookings_for_event(event.id))

    assert [b.email for b in bookings] == ["a@b.com", "c@d.com", "e@f.com"]
    assert asyncio.run(service.count_bookings_for_event(event.id)) == 3
