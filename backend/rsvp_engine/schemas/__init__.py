from rsvp_engine.schemas.event import (
    EventCreate, EventUpdate, EventCancel, EventResponse, AttendanceSummaryResponse,
    StatusTransitionResponse, TickRequest, TickResponse,
)
from rsvp_engine.schemas.attendance import (
    RsvpRequest, ReminderRequest, TicketResponse, AttendanceResponse,
    TicketWithPayloadResponse, CheckInRequest, CheckInResponse, ReminderTargetResponse,
)

__all__ = [
    "EventCreate", "EventUpdate", "EventCancel", "EventResponse", "AttendanceSummaryResponse",
    "StatusTransitionResponse", "TickRequest", "TickResponse",
    "RsvpRequest", "ReminderRequest", "TicketResponse", "AttendanceResponse",
    "TicketWithPayloadResponse", "CheckInRequest", "CheckInResponse", "ReminderTargetResponse",
]
