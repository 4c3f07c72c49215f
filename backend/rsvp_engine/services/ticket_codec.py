"""
Ticket codec: the opaque string embedded in a ticket's scannable code.

Format (v1): compact JSON of the payload fields, url-safe base64 without
padding. The scanner side may also hand back the raw JSON, which older
clients put straight into the QR code, so decode accepts both.

The payload is informational. Validation only trusts `ticket_id` and
re-checks everything else against the engine's own records.
"""

import base64
import binascii
import json
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from rsvp_engine.core.errors import InvalidTicketError
from rsvp_engine.models import Ticket

PAYLOAD_VERSION = 1


class TicketPayload(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    v: int = PAYLOAD_VERSION
    ticket_id: str = Field(..., min_length=1, alias="ticketId")
    event_id: Optional[str] = Field(None, alias="eventId")
    user_id: Optional[str] = Field(None, alias="userId")
    issued_at: Optional[datetime] = Field(None, alias="issuedAt")


def payload_for(ticket: Ticket) -> TicketPayload:
    return TicketPayload(
        ticket_id=ticket.ticket_id,
        event_id=ticket.event_id,
        user_id=ticket.user_id,
        issued_at=ticket.issued_at,
    )


def encode_ticket_payload(payload: TicketPayload) -> str:
    raw = payload.model_dump_json(exclude_none=True).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_ticket_payload(data: str) -> TicketPayload:
    """
    Parse a scanned string back into a payload.

    Raises:
        InvalidTicketError: the string is not a payload this codec produced.
    """
    text = (data or "").strip()
    if not text:
        raise InvalidTicketError("Empty ticket payload")

    if not text.startswith("{"):
        try:
            padded = text + "=" * (-len(text) % 4)
            text = base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")
        except (binascii.Error, UnicodeError, ValueError):
            raise InvalidTicketError("Unreadable ticket payload")

    try:
        fields = json.loads(text)
    except ValueError:
        raise InvalidTicketError("Unreadable ticket payload")
    if not isinstance(fields, dict):
        raise InvalidTicketError("Unreadable ticket payload")

    version = fields.get("v", PAYLOAD_VERSION)
    if version != PAYLOAD_VERSION:
        raise InvalidTicketError(f"Unsupported ticket payload version {version}")

    try:
        return TicketPayload.model_validate(fields)
    except PydanticValidationError:
        raise InvalidTicketError("Ticket payload is missing a ticket id")
