"""
Event endpoints: create, list, inspect, edit, cancel.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from rsvp_engine.api.deps import get_current_user_id
from rsvp_engine.schemas.event import (
    AttendanceSummaryResponse,
    EventCancel,
    EventCreate,
    EventResponse,
    EventUpdate,
)
from rsvp_engine.services.engine_factory import get_controller
from rsvp_engine.services.lifecycle import EventLifecycleController

router = APIRouter(prefix="/events", tags=["Events"])


@router.post("/", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def create_event_endpoint(
    event_data: EventCreate,
    user_id: str = Depends(get_current_user_id),
    controller: EventLifecycleController = Depends(get_controller),
):
    """Create a new event. The caller becomes its organizer."""
    return controller.create_event(
        organizer_id=user_id,
        title=event_data.title,
        starts_at=event_data.starts_at,
        ends_at=event_data.ends_at,
        capacity=event_data.capacity,
        requires_ticket=event_data.requires_ticket,
        ticket_price=event_data.ticket_price,
    )


@router.get("/", response_model=list[EventResponse])
def list_events_endpoint(
    status_filter: Optional[str] = Query(None, alias="status"),
    sort: str = Query("upcoming"),
    controller: EventLifecycleController = Depends(get_controller),
):
    """List events. Sort by `upcoming`, `latest` or `popular`."""
    return controller.list_events(status=status_filter, sort=sort)


@router.get("/mine", response_model=list[EventResponse])
def my_events_endpoint(
    user_id: str = Depends(get_current_user_id),
    controller: EventLifecycleController = Depends(get_controller),
):
    """Events the caller is going to or interested in, soonest first."""
    return controller.list_events_for_user(user_id)


@router.get("/{event_id}", response_model=EventResponse)
def get_event_endpoint(
    event_id: str,
    controller: EventLifecycleController = Depends(get_controller),
):
    return controller.get_event(event_id)


@router.get("/{event_id}/summary", response_model=AttendanceSummaryResponse)
def attendance_summary_endpoint(
    event_id: str,
    controller: EventLifecycleController = Depends(get_controller),
):
    """Going/interested counts and remaining seats."""
    return controller.attendance_summary(event_id)


@router.post("/{event_id}/cancel", response_model=EventResponse)
def cancel_event_endpoint(
    event_id: str,
    cancel_data: EventCancel,
    user_id: str = Depends(get_current_user_id),
    controller: EventLifecycleController = Depends(get_controller),
):
    """Cancel an upcoming or ongoing event. Organizer only, irreversible."""
    return controller.cancel_event(event_id, organizer_id=user_id, reason=cancel_data.reason)


@router.patch("/{event_id}", response_model=EventResponse)
def update_event_endpoint(
    event_id: str,
    update_data: EventUpdate,
    user_id: str = Depends(get_current_user_id),
    controller: EventLifecycleController = Depends(get_controller),
):
    """Edit an upcoming or ongoing event. Organizer only."""
    return controller.update_event(
        event_id,
        organizer_id=user_id,
        **update_data.model_dump(exclude_unset=True),
    )
