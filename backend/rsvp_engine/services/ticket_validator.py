"""
Ticket validator: door-side check-in.

The only place a ticket goes from issued to consumed. Checks run in a fixed
order so door staff get the most specific answer:

  1. ticket exists                      -> InvalidTicketError
  2. ticket belongs to this event       -> InvalidTicketError
  3. ticket is the attendee's live one  -> TicketRevokedError
  4. event is open for check-in         -> InvalidStateError
  5. ticket not yet used                -> TicketAlreadyUsedError
  6. compare-and-set validated_at

Step 6 goes through the store's compare-and-set, so two scans of the same
ticket racing past step 5 still produce exactly one success.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from rsvp_engine.core.errors import (
    InvalidStateError,
    InvalidTicketError,
    TicketAlreadyUsedError,
    TicketRevokedError,
)
from rsvp_engine.core.logging import get_logger
from rsvp_engine.core.metrics import record_checkin
from rsvp_engine.models import Event, EventStatus, Ticket
from rsvp_engine.services.interfaces.store import EngineStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class CheckInResult:
    ticket: Ticket
    user_id: str
    event_id: str


class TicketValidator:
    def __init__(
        self,
        store: EngineStore,
        clock: Callable[[], datetime],
        grace: timedelta = timedelta(0),
    ):
        self._store = store
        self._clock = clock
        self._grace = grace

    def validate(self, ticket_id: str, event: Event) -> CheckInResult:
        """Consume `ticket_id` at `event`'s door. Caller must hold the event lock."""
        ticket = self._store.get_ticket(ticket_id)
        if ticket is None:
            self._reject_misuse(ticket_id, event.id, reason="unknown_ticket")
        if ticket.event_id != event.id:
            self._reject_misuse(
                ticket_id, event.id, reason="event_mismatch", ticket_event_id=ticket.event_id
            )

        attendance = self._store.get_attendance(event.id, ticket.user_id)
        if attendance is None or attendance.live_ticket_id != ticket.ticket_id:
            record_checkin("revoked")
            logger.info("checkin_rejected_revoked", ticket_id=ticket_id, event_id=event.id)
            raise TicketRevokedError(ticket_id)

        now = self._clock()
        if not self._check_in_open(event, now):
            record_checkin("invalid_state")
            raise InvalidStateError(
                f"Check-in is not open while the event is {event.status.value}",
                event_id=event.id,
                status=event.status.value,
            )

        if ticket.validated_at is not None:
            self._reject_reuse(ticket)

        claimed, ticket = self._store.mark_ticket_validated(ticket_id, now)
        if not claimed:
            self._reject_reuse(ticket)

        record_checkin("success")
        logger.info("ticket_checked_in", ticket_id=ticket_id, event_id=event.id, user_id=ticket.user_id)
        return CheckInResult(ticket=ticket, user_id=ticket.user_id, event_id=event.id)

    def _check_in_open(self, event: Event, now: datetime) -> bool:
        if event.status is EventStatus.ONGOING:
            return True
        if event.status is EventStatus.UPCOMING and self._grace > timedelta(0):
            return now >= event.starts_at - self._grace
        return False

    def _reject_reuse(self, ticket: Ticket):
        record_checkin("already_used")
        logger.info(
            "checkin_rejected_already_used",
            ticket_id=ticket.ticket_id,
            validated_at=ticket.validated_at.isoformat(),
        )
        raise TicketAlreadyUsedError(ticket.ticket_id, ticket.validated_at)

    def _reject_misuse(self, ticket_id: str, event_id: str, reason: str, **context):
        # Logged under its own event name so abuse monitoring can alert on it
        record_checkin("invalid")
        logger.warning(
            "ticket_misuse_detected",
            ticket_id=ticket_id,
            event_id=event_id,
            reason=reason,
            **context,
        )
        raise InvalidTicketError("Invalid ticket", ticket_id=ticket_id)
