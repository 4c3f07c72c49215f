"""
Door-side check-in endpoint.
"""

from fastapi import APIRouter, Depends

from rsvp_engine.api.deps import get_current_user_id
from rsvp_engine.schemas.attendance import CheckInRequest, CheckInResponse, TicketResponse
from rsvp_engine.services.engine_factory import get_controller
from rsvp_engine.services.lifecycle import EventLifecycleController

router = APIRouter(prefix="/events/{event_id}", tags=["Tickets"])


@router.post("/check-in", response_model=CheckInResponse)
def check_in_endpoint(
    event_id: str,
    check_in: CheckInRequest,
    staff_id: str = Depends(get_current_user_id),
    controller: EventLifecycleController = Depends(get_controller),
):
    """
    Validate and consume a ticket. Organizer only.

    Accepts either a bare ticket id or the scanned payload string.
    A second scan of the same ticket returns 409 with the original check-in time.
    """
    if check_in.payload is not None:
        result = controller.check_in_payload(check_in.payload, event_id, staff_id=staff_id)
    else:
        result = controller.validate_ticket(check_in.ticket_id, event_id, staff_id=staff_id)

    return CheckInResponse(
        event_id=result.event_id,
        user_id=result.user_id,
        ticket=TicketResponse.model_validate(result.ticket),
    )
