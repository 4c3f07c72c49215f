"""
In-memory implementation of EngineStore.

Layout:
  events:       event_id -> _EventBucket(event, attendances by user_id, going_count)
  tickets:      ticket_id -> Ticket (all tickets ever minted, kept for audit)

The going count is maintained incrementally in save_attendance, which callers
invoke while holding the event lock, so the count and the rows never disagree.
Tickets live in one shared map behind their own lock because validation looks
them up by id before the owning event is known.
"""

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterator, Optional

from rsvp_engine.core.errors import EventNotFoundError
from rsvp_engine.infrastructure.locks import KeyedLocks
from rsvp_engine.models import Attendance, Event, Ticket
from rsvp_engine.services.interfaces.store import EngineStore


@dataclass
class _EventBucket:
    event: Event
    attendances: dict[str, Attendance] = field(default_factory=dict)
    going_count: int = 0


class InMemoryStore(EngineStore):
    """Thread-safe keyed store for a single process."""

    def __init__(self):
        self._events: dict[str, _EventBucket] = {}
        self._events_lock = threading.Lock()
        self._tickets: dict[str, Ticket] = {}
        self._tickets_lock = threading.Lock()
        self._locks = KeyedLocks()

    @contextmanager
    def locked(self, event_id: str) -> Iterator[None]:
        # Locks are registered by save_event, so unknown ids never allocate one
        lock = self._locks.get(event_id)
        if lock is None:
            raise EventNotFoundError(event_id)
        with lock:
            yield

    # Events

    def get_event(self, event_id: str) -> Optional[Event]:
        bucket = self._events.get(event_id)
        return bucket.event if bucket else None

    def save_event(self, event: Event) -> None:
        with self._events_lock:
            bucket = self._events.get(event.id)
            if bucket is None:
                self._locks.register(event.id)
                self._events[event.id] = _EventBucket(event=event)
            else:
                bucket.event = event

    def list_event_ids(self) -> list[str]:
        with self._events_lock:
            return list(self._events)

    # Attendance

    def get_attendance(self, event_id: str, user_id: str) -> Optional[Attendance]:
        bucket = self._events.get(event_id)
        if bucket is None:
            return None
        return bucket.attendances.get(user_id)

    def save_attendance(self, attendance: Attendance) -> None:
        bucket = self._events.get(attendance.event_id)
        if bucket is None:
            raise KeyError(f"Unknown event {attendance.event_id}")

        previous = bucket.attendances.get(attendance.user_id)
        was_going = previous is not None and previous.is_going
        if attendance.is_going and not was_going:
            bucket.going_count += 1
        elif was_going and not attendance.is_going:
            bucket.going_count -= 1
        bucket.attendances[attendance.user_id] = attendance

    def list_attendances(self, event_id: str) -> list[Attendance]:
        bucket = self._events.get(event_id)
        if bucket is None:
            return []
        return list(bucket.attendances.values())

    def count_going(self, event_id: str) -> int:
        bucket = self._events.get(event_id)
        return bucket.going_count if bucket else 0

    # Tickets

    def get_ticket(self, ticket_id: str) -> Optional[Ticket]:
        with self._tickets_lock:
            return self._tickets.get(ticket_id)

    def add_ticket(self, ticket: Ticket) -> None:
        with self._tickets_lock:
            if ticket.ticket_id in self._tickets:
                raise KeyError(f"Duplicate ticket id {ticket.ticket_id}")
            self._tickets[ticket.ticket_id] = ticket

    def mark_ticket_validated(self, ticket_id: str, now: datetime) -> tuple[bool, Ticket]:
        with self._tickets_lock:
            ticket = self._tickets[ticket_id]
            if ticket.validated_at is not None:
                return False, ticket
            updated = replace(ticket, validated_at=now)
            self._tickets[ticket_id] = updated
            return True, updated
