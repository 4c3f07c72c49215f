"""
Pydantic schemas for event-related request/response validation.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field

from rsvp_engine.models import EventStatus


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    starts_at: datetime
    ends_at: Optional[datetime] = None
    capacity: int = Field(0, ge=0, le=100000)  # 0 = unlimited
    requires_ticket: bool = False
    ticket_price: Decimal = Field(Decimal("0"), ge=0, max_digits=10, decimal_places=2)


class EventUpdate(BaseModel):
    """Partial edit; omitted fields keep their current value."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    capacity: Optional[int] = Field(None, ge=0, le=100000)
    requires_ticket: Optional[bool] = None
    ticket_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)


class EventCancel(BaseModel):
    reason: str = Field(..., max_length=1000)


class EventResponse(BaseModel):
    id: str
    organizer_id: str
    title: str
    starts_at: datetime
    ends_at: datetime
    status: EventStatus
    capacity: int
    requires_ticket: bool
    ticket_price: Decimal
    cancellation_reason: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class AttendanceSummaryResponse(BaseModel):
    event_id: str
    going: int
    interested: int
    capacity: int
    remaining: Optional[int]

    model_config = {"from_attributes": True}


class StatusTransitionResponse(BaseModel):
    event_id: str
    from_status: EventStatus
    to_status: EventStatus
    at: datetime

    model_config = {"from_attributes": True}


class TickRequest(BaseModel):
    now: Optional[datetime] = None


class TickResponse(BaseModel):
    transitions: list[StatusTransitionResponse]
