"""
Pydantic schemas for RSVP, reminder and ticket request/response validation.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from rsvp_engine.models import RsvpStatus


class RsvpRequest(BaseModel):
    # Plain string so unknown values reach the engine and come back as VALIDATION_ERROR
    status: str = Field(..., examples=["going", "interested", "not_going"])


class ReminderRequest(BaseModel):
    enabled: bool


class TicketResponse(BaseModel):
    ticket_id: str
    event_id: str
    user_id: str
    issued_at: datetime
    validated_at: Optional[datetime]

    model_config = {"from_attributes": True}


class AttendanceResponse(BaseModel):
    event_id: str
    user_id: str
    rsvp_status: RsvpStatus
    reminder_enabled: bool
    responded_at: Optional[datetime]
    ticket: Optional[TicketResponse] = None

    @classmethod
    def from_view(cls, view) -> "AttendanceResponse":
        attendance = view.attendance
        return cls(
            event_id=attendance.event_id,
            user_id=attendance.user_id,
            rsvp_status=attendance.rsvp_status,
            reminder_enabled=attendance.reminder_enabled,
            responded_at=attendance.responded_at,
            ticket=TicketResponse.model_validate(view.ticket) if view.ticket else None,
        )


class TicketWithPayloadResponse(BaseModel):
    ticket: TicketResponse
    payload: str  # feed to the scannable-code renderer


class CheckInRequest(BaseModel):
    ticket_id: Optional[str] = None
    payload: Optional[str] = None

    @model_validator(mode="after")
    def exactly_one_source(self) -> "CheckInRequest":
        if (self.ticket_id is None) == (self.payload is None):
            raise ValueError("Provide exactly one of ticket_id or payload")
        return self


class CheckInResponse(BaseModel):
    valid: bool = True
    message: str = "Valid ticket - Entry granted"
    event_id: str
    user_id: str
    ticket: TicketResponse


class ReminderTargetResponse(BaseModel):
    event_id: str
    user_id: str
    rsvp_status: RsvpStatus
    starts_at: datetime

    model_config = {"from_attributes": True}
