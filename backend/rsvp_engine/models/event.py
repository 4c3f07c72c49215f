"""
Event record and lifecycle status.

Key design decisions:
- Frozen dataclass: the controller replaces the record under the event lock
  instead of mutating it, so snapshots handed to callers never change under them
- `cancellation_reason` is set if and only if status is cancelled (checked on construction)
- `capacity == 0` means unlimited
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class EventStatus(str, Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_active(self) -> bool:
        return self in (EventStatus.UPCOMING, EventStatus.ONGOING)

    @property
    def is_terminal(self) -> bool:
        return not self.is_active


@dataclass(frozen=True)
class Event:
    id: str
    organizer_id: str
    title: str
    starts_at: datetime
    ends_at: datetime
    created_at: datetime
    capacity: int = 0
    requires_ticket: bool = False
    ticket_price: Decimal = Decimal("0")
    status: EventStatus = EventStatus.UPCOMING
    cancellation_reason: Optional[str] = None

    def __post_init__(self) -> None:
        if self.capacity < 0:
            raise ValueError("Capacity cannot be negative")
        if self.ticket_price < 0:
            raise ValueError("Ticket price cannot be negative")
        if self.ends_at <= self.starts_at:
            raise ValueError("Event must end after it starts")
        if (self.status is EventStatus.CANCELLED) != (self.cancellation_reason is not None):
            raise ValueError("cancellation_reason must be set exactly when the event is cancelled")

    @property
    def is_unlimited(self) -> bool:
        return self.capacity == 0

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, status={self.status.value}, capacity={self.capacity})>"
