"""
Ticket record.

Tickets are never deleted. A ticket stops being usable when its owning
Attendance no longer references it (see models/attendance.py); there is no
stored revoked flag. `validated_at` is written once by the validator.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Ticket:
    ticket_id: str
    event_id: str
    user_id: str
    issued_at: datetime
    validated_at: Optional[datetime] = None

    @property
    def is_used(self) -> bool:
        return self.validated_at is not None

    def __repr__(self) -> str:
        return f"<Ticket(id={self.ticket_id}, event={self.event_id}, user={self.user_id}, used={self.is_used})>"
