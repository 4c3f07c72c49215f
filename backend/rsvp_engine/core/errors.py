"""
Engine error taxonomy.

Every engine operation either returns a success payload or raises one of the
EngineError subclasses below. Errors are raised before any mutation, so a
failed call leaves state exactly as it was. The HTTP layer maps them onto
status codes via `status_code`; nothing inside the engine retries.
"""

from datetime import datetime
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_STATE = "INVALID_STATE"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    TICKET_REVOKED = "TICKET_REVOKED"
    TICKET_ALREADY_USED = "TICKET_ALREADY_USED"
    INVALID_TICKET = "INVALID_TICKET"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    TICKET_NOT_FOUND = "TICKET_NOT_FOUND"
    PERMISSION_DENIED = "PERMISSION_DENIED"


class EngineError(Exception):
    """Base error with a stable code and a user-safe message."""

    code: ErrorCode
    status_code: int = 400

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict:
        return {"code": self.code.value, "detail": self.message, **self.context}


class ValidationError(EngineError):
    """Malformed input. The caller must fix the request."""

    code = ErrorCode.VALIDATION_ERROR
    status_code = 400


class InvalidStateError(EngineError):
    """Action not legal for the event's current lifecycle status."""

    code = ErrorCode.INVALID_STATE
    status_code = 409


class CapacityExceededError(EngineError):
    code = ErrorCode.CAPACITY_EXCEEDED
    status_code = 409

    def __init__(self, event_id: str, capacity: int) -> None:
        super().__init__("Event is at full capacity", event_id=event_id, capacity=capacity)
        self.event_id = event_id
        self.capacity = capacity


class TicketRevokedError(EngineError):
    """The ticket's attendee is no longer going, or the ticket was superseded."""

    code = ErrorCode.TICKET_REVOKED
    status_code = 409

    def __init__(self, ticket_id: str) -> None:
        super().__init__("Ticket has been revoked", ticket_id=ticket_id)
        self.ticket_id = ticket_id


class TicketAlreadyUsedError(EngineError):
    code = ErrorCode.TICKET_ALREADY_USED
    status_code = 409

    def __init__(self, ticket_id: str, validated_at: datetime) -> None:
        super().__init__(
            f"Ticket already checked in at {validated_at:%H:%M}",
            ticket_id=ticket_id,
            validated_at=validated_at.isoformat(),
        )
        self.ticket_id = ticket_id
        self.validated_at = validated_at


class InvalidTicketError(EngineError):
    """Unknown ticket id, event mismatch or unreadable payload."""

    code = ErrorCode.INVALID_TICKET
    status_code = 400


class EventNotFoundError(EngineError):
    code = ErrorCode.EVENT_NOT_FOUND
    status_code = 404

    def __init__(self, event_id: str) -> None:
        super().__init__("Event not found", event_id=event_id)
        self.event_id = event_id


class TicketNotFoundError(EngineError):
    code = ErrorCode.TICKET_NOT_FOUND
    status_code = 404

    def __init__(self, event_id: str, user_id: str) -> None:
        super().__init__("No ticket found", event_id=event_id)
        self.event_id = event_id
        self.user_id = user_id


class PermissionDeniedError(EngineError):
    code = ErrorCode.PERMISSION_DENIED
    status_code = 403
