from rsvp_engine.models.event import Event, EventStatus
from rsvp_engine.models.ticket import Ticket
from rsvp_engine.models.attendance import (
    Attendance,
    Going,
    Interested,
    NotGoing,
    RsvpState,
    RsvpStatus,
    state_for,
)

__all__ = [
    "Event", "EventStatus",
    "Ticket",
    "Attendance", "RsvpStatus", "RsvpState", "NotGoing", "Interested", "Going", "state_for",
]
