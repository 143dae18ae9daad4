"""
Admin API routes - requires authentication
"""

from fastapi import APIRouter, Depends

from devevent.core.connection import get_database
from devevent.schemas.event import EventCreate, EventUpdate
from devevent.services.bookings import BookingService
from devevent.services.events import EventService
from devevent.services.repositories import Database
from devevent.utils.security import verify_admin_token
from devevent.utils.responses import success_response

router = APIRouter()

@router.post("/events")
async def create_event(
    event_data: EventCreate,
    token: str = Depends(verify_admin_token),
    db: Database = Depends(get_database)
):
    """Create a new event"""
    event = await EventService(db).create_event(event_data.model_dump())
    return success_response(
        message="Event created successfully",
        data=event.model_dump(),
        status_code=201
    )

@router.patch("/events/{event_id}")
async def update_event(
    event_id: str,
    event_data: EventUpdate,
    token: str = Depends(verify_admin_token),
    db: Database = Depends(get_database)
):
    """Edit an event; the slug follows the title"""
    event = await EventService(db).update_event(event_id, event_data.model_dump(exclude_unset=True))
    return success_response(message="Event updated successfully", data=event.model_dump())

@router.get("/events/{event_id}/bookings")
async def list_event_bookings(
    event_id: str,
    token: str = Depends(verify_admin_token),
    db: Database = Depends(get_database)
):
    """List bookings for an event"""
    event = await EventService(db).get_event(event_id)
    bookings = await BookingService(db).list_bookings_for_event(event.id)
    return success_response(
        message=f"Found {len(bookings)} bookings",
        data=[booking.model_dump() for booking in bookings]
    )
