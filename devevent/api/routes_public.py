"""
Public API routes - no authentication required
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from devevent.core.config import settings
from devevent.core.connection import get_database
from devevent.schemas.booking import BookingCreate, BookingUpdate
from devevent.schemas.event import EventDetail
from devevent.services.bookings import BookingService
from devevent.services.events import EventService
from devevent.services.repositories import Database
from devevent.utils.responses import success_response

router = APIRouter()

@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok"}

@router.get("/api/events")
async def list_events(
    tag: Optional[str] = None,
    mode: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    db: Database = Depends(get_database)
):
    """List events, newest first, optionally filtered by tag or mode"""
    limit = min(limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
    events = await EventService(db).list_events(tag=tag, mode=mode, limit=limit, offset=offset)
    return success_response(
        message="Events retrieved",
        data=[event.model_dump() for event in events]
    )

@router.get("/api/events/{slug}")
async def get_event(slug: str, db: Database = Depends(get_database)):
    """Get a single event by slug with its booking count"""
    event = await EventService(db).get_event_by_slug(slug)
    bookings_count = await BookingService(db).count_bookings_for_event(event.id)
    detail = EventDetail(**event.model_dump(), bookings_count=bookings_count)
    return success_response(message="Event retrieved", data=detail.model_dump())

@router.post("/api/bookings")
async def create_booking(booking_data: BookingCreate, db: Database = Depends(get_database)):
    """Book an event"""
    booking = await BookingService(db).create_booking(booking_data.model_dump())
    return success_response(
        message="Booking created successfully",
        data=booking.model_dump(),
        status_code=201
    )

@router.patch("/api/bookings/{booking_id}")
async def update_booking(
    booking_id: str,
    booking_data: BookingUpdate,
    db: Database = Depends(get_database)
):
    """Change the email or the event of a booking"""
    booking = await BookingService(db).update_booking(
        booking_id, booking_data.model_dump(exclude_unset=True)
    )
    return success_response(message="Booking updated successfully", data=booking.model_dump())
