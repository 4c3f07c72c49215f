"""
Attendance record: one user's relationship to one event.

Key design decisions:
- RSVP state is a small variant (NotGoing | Interested | Going) and only the
  Going variant can reference a ticket, so "ticket without going" cannot be built
- Going holds the ticket id, not the ticket; the ticket registry is the single
  source of truth for `validated_at`
- A ticket id dropped from the state (user left going, or was re-issued a new one)
  is what "revoked" means
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Optional, Union


class RsvpStatus(str, Enum):
    NOT_GOING = "not_going"
    INTERESTED = "interested"
    GOING = "going"


@dataclass(frozen=True)
class NotGoing:
    status: RsvpStatus = field(default=RsvpStatus.NOT_GOING, init=False)


@dataclass(frozen=True)
class Interested:
    status: RsvpStatus = field(default=RsvpStatus.INTERESTED, init=False)


@dataclass(frozen=True)
class Going:
    ticket_id: Optional[str] = None
    status: RsvpStatus = field(default=RsvpStatus.GOING, init=False)


RsvpState = Union[NotGoing, Interested, Going]


def state_for(status: RsvpStatus, ticket_id: Optional[str] = None) -> RsvpState:
    if status is RsvpStatus.GOING:
        return Going(ticket_id=ticket_id)
    if ticket_id is not None:
        raise ValueError("Only a going RSVP can hold a ticket")
    if status is RsvpStatus.INTERESTED:
        return Interested()
    return NotGoing()


@dataclass(frozen=True)
class Attendance:
    event_id: str
    user_id: str
    state: RsvpState = field(default_factory=NotGoing)
    reminder_enabled: bool = False
    responded_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def blank(cls, event_id: str, user_id: str) -> "Attendance":
        """Zero-value record for a user who has never acted on the event."""
        return cls(event_id=event_id, user_id=user_id)

    @property
    def rsvp_status(self) -> RsvpStatus:
        return self.state.status

    @property
    def is_going(self) -> bool:
        return isinstance(self.state, Going)

    @property
    def live_ticket_id(self) -> Optional[str]:
        if isinstance(self.state, Going):
            return self.state.ticket_id
        return None

    def with_state(self, state: RsvpState, now: datetime) -> "Attendance":
        return replace(
            self,
            state=state,
            responded_at=self.responded_at or now,
            updated_at=now,
        )

    def with_reminder(self, enabled: bool, now: datetime) -> "Attendance":
        return replace(self, reminder_enabled=enabled, updated_at=now)

    def __repr__(self) -> str:
        return (
            f"<Attendance(event={self.event_id}, user={self.user_id}, "
            f"status={self.rsvp_status.value}, reminder={self.reminder_enabled})>"
        )
