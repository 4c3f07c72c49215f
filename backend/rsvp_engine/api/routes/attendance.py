"""
Attendee endpoints: RSVP, reminder toggle, own attendance and ticket.

Route functions are plain `def` so FastAPI runs them on its thread pool;
the engine serializes per event with its own locks.
"""

from fastapi import APIRouter, Depends

from rsvp_engine.api.deps import get_current_user_id
from rsvp_engine.schemas.attendance import (
    AttendanceResponse,
    ReminderRequest,
    RsvpRequest,
    TicketResponse,
    TicketWithPayloadResponse,
)
from rsvp_engine.services.engine_factory import get_controller
from rsvp_engine.services.lifecycle import EventLifecycleController

router = APIRouter(prefix="/events/{event_id}", tags=["Attendance"])


@router.put("/rsvp", response_model=AttendanceResponse)
def rsvp_endpoint(
    event_id: str,
    rsvp_data: RsvpRequest,
    user_id: str = Depends(get_current_user_id),
    controller: EventLifecycleController = Depends(get_controller),
):
    """
    Set the caller's RSVP to the given end state.

    Idempotent: sending the current status again returns the same record and
    the same ticket. Returns 409 when the event is full or no longer active.
    """
    view = controller.rsvp(event_id, user_id, rsvp_data.status)
    return AttendanceResponse.from_view(view)


@router.get("/attendance", response_model=AttendanceResponse)
def get_attendance_endpoint(
    event_id: str,
    user_id: str = Depends(get_current_user_id),
    controller: EventLifecycleController = Depends(get_controller),
):
    view = controller.get_attendance(event_id, user_id)
    return AttendanceResponse.from_view(view)


@router.put("/reminder", response_model=AttendanceResponse)
def set_reminder_endpoint(
    event_id: str,
    reminder_data: ReminderRequest,
    user_id: str = Depends(get_current_user_id),
    controller: EventLifecycleController = Depends(get_controller),
):
    view = controller.set_reminder(event_id, user_id, reminder_data.enabled)
    return AttendanceResponse.from_view(view)


@router.get("/ticket", response_model=TicketWithPayloadResponse)
def get_ticket_endpoint(
    event_id: str,
    user_id: str = Depends(get_current_user_id),
    controller: EventLifecycleController = Depends(get_controller),
):
    """The caller's live ticket and the payload to embed in its scannable code."""
    view = controller.get_ticket(event_id, user_id)
    return TicketWithPayloadResponse(
        ticket=TicketResponse.model_validate(view.ticket),
        payload=view.payload,
    )
