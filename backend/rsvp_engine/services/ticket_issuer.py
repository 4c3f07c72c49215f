"""
Ticket issuer: mints at most one live ticket per (event, user).

Called by the RSVP ledger right after an attendance moves to (or re-asserts)
going on a ticketed event, while the event lock is held.
"""

import secrets
from datetime import datetime
from typing import Callable

from rsvp_engine.core.logging import get_logger
from rsvp_engine.core.metrics import record_ticket_issued
from rsvp_engine.models import Attendance, Event, Ticket
from rsvp_engine.services.interfaces.store import EngineStore

logger = get_logger(__name__)

TICKET_TOKEN_BYTES = 16  # 128 bits


def new_ticket_id(prefix: str) -> str:
    return f"{prefix}{secrets.token_urlsafe(TICKET_TOKEN_BYTES)}"


class TicketIssuer:
    def __init__(self, store: EngineStore, clock: Callable[[], datetime], prefix: str = "TICKET-"):
        self._store = store
        self._clock = clock
        self._prefix = prefix

    def issue_if_eligible(self, event: Event, attendance: Attendance) -> Ticket:
        """
        Return the attendance's live ticket, minting one if it has none.

        `attendance` is the record as it was before the current transition:
        if it was already going with a ticket, that ticket is returned unchanged.
        A ticket dropped by an earlier move away from going is never reused.
        """
        live_id = attendance.live_ticket_id
        if live_id is not None:
            ticket = self._store.get_ticket(live_id)
            if ticket is not None:
                return ticket

        ticket = Ticket(
            ticket_id=new_ticket_id(self._prefix),
            event_id=event.id,
            user_id=attendance.user_id,
            issued_at=self._clock(),
        )
        self._store.add_ticket(ticket)
        record_ticket_issued()

        logger.info(
            "ticket_issued",
            ticket_id=ticket.ticket_id,
            event_id=event.id,
            user_id=attendance.user_id,
        )
        return ticket
