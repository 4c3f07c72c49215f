"""
Engine store interface.
Allows swapping the in-memory keyed store for a persistent one without
changing the ledger, issuer or validator.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import ContextManager, Optional

from rsvp_engine.models import Attendance, Event, Ticket


class EngineStore(ABC):
    """
    Interface for event, attendance and ticket persistence.

    Writes to an event's attendances must happen while holding `locked(event_id)`;
    implementations rely on that to keep the cached going count consistent.
    Ticket validation uses `mark_ticket_validated`, which is atomic on its own.
    """

    @abstractmethod
    def locked(self, event_id: str) -> ContextManager[None]:
        """
        Per-event mutual exclusion scope.

        Operations on different events must not block each other. Raises
        EventNotFoundError for an id that was never saved.
        """
        pass

    @abstractmethod
    def get_event(self, event_id: str) -> Optional[Event]:
        pass

    @abstractmethod
    def save_event(self, event: Event) -> None:
        pass

    @abstractmethod
    def list_event_ids(self) -> list[str]:
        pass

    @abstractmethod
    def get_attendance(self, event_id: str, user_id: str) -> Optional[Attendance]:
        pass

    @abstractmethod
    def save_attendance(self, attendance: Attendance) -> None:
        pass

    @abstractmethod
    def list_attendances(self, event_id: str) -> list[Attendance]:
        pass

    @abstractmethod
    def count_going(self, event_id: str) -> int:
        """Number of attendances currently in the going state for this event."""
        pass

    @abstractmethod
    def get_ticket(self, ticket_id: str) -> Optional[Ticket]:
        pass

    @abstractmethod
    def add_ticket(self, ticket: Ticket) -> None:
        pass

    @abstractmethod
    def mark_ticket_validated(self, ticket_id: str, now: datetime) -> tuple[bool, Ticket]:
        """
        Compare-and-set `validated_at` from None to `now`.

        Returns:
            (True, updated ticket) if this call set it,
            (False, stored ticket) if it was already set.
        """
        pass
