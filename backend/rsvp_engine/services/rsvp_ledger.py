"""
RSVP ledger with capacity-aware, idempotent status transitions.

CONCURRENCY STRATEGY: Per-event lock, count-then-write
======================================================

Problem:
  Two users RSVP "going" for the last slot simultaneously.
  Both count going=N-1, both write, both succeed.
  Result: Overbooking.

Solution:
  The lifecycle controller holds the event's lock around every call into
  this ledger. Inside that scope the going count (cached in the store and
  updated on every save) cannot move, so "count, compare, write" behaves as
  one step. Different events use different locks and never wait on each other.

  Every check runs before the single save at the end, so a rejected call
  writes nothing.
"""

from datetime import datetime
from typing import Callable

from rsvp_engine.core.errors import CapacityExceededError
from rsvp_engine.core.logging import get_logger
from rsvp_engine.models import Attendance, Event, Going, RsvpStatus, state_for
from rsvp_engine.services.interfaces.store import EngineStore
from rsvp_engine.services.ticket_issuer import TicketIssuer

logger = get_logger(__name__)


class RsvpLedger:
    def __init__(self, store: EngineStore, issuer: TicketIssuer, clock: Callable[[], datetime]):
        self._store = store
        self._issuer = issuer
        self._clock = clock

    def current(self, event_id: str, user_id: str) -> Attendance:
        """Stored attendance, or the zero-value not_going record (not persisted)."""
        return self._store.get_attendance(event_id, user_id) or Attendance.blank(event_id, user_id)

    def set_status(self, event: Event, user_id: str, new_status: RsvpStatus) -> Attendance:
        """
        Move the user's RSVP to `new_status`. Caller must hold the event lock.

        Re-sending the current status is allowed and re-applies the same side
        effects: the capacity check, forcing the reminder on for going, and
        returning the same live ticket.
        """
        current = self.current(event.id, user_id)
        now = self._clock()

        if new_status is RsvpStatus.GOING:
            self._check_capacity(event, current)

            ticket_id = None
            if event.requires_ticket:
                ticket_id = self._issuer.issue_if_eligible(event, current).ticket_id
            updated = current.with_state(Going(ticket_id=ticket_id), now).with_reminder(True, now)
        else:
            # Leaving going drops the ticket reference; the ticket itself stays
            # in the registry and fails validation from now on.
            updated = current.with_state(state_for(new_status), now)

        self._store.save_attendance(updated)

        if current.rsvp_status is not new_status:
            logger.info(
                "rsvp_status_changed",
                event_id=event.id,
                user_id=user_id,
                previous=current.rsvp_status.value,
                status=new_status.value,
                ticket_revoked=current.live_ticket_id is not None and updated.live_ticket_id is None,
            )
        return updated

    def _check_capacity(self, event: Event, current: Attendance) -> None:
        if event.is_unlimited:
            return

        going = self._store.count_going(event.id)
        others = going - 1 if current.is_going else going
        if others >= event.capacity:
            logger.warning(
                "rsvp_rejected_capacity",
                event_id=event.id,
                user_id=current.user_id,
                capacity=event.capacity,
                going=going,
            )
            raise CapacityExceededError(event_id=event.id, capacity=event.capacity)
