"""
Tests for the ticket payload codec.
"""

import base64
import json
from datetime import datetime, timezone

import pytest

from rsvp_engine.core.errors import InvalidTicketError
from rsvp_engine.models import Ticket
from rsvp_engine.services.ticket_codec import (
    TicketPayload,
    decode_ticket_payload,
    encode_ticket_payload,
    payload_for,
)

TICKET = Ticket(
    ticket_id="TICKET-abc123",
    event_id="event-1",
    user_id="user-1",
    issued_at=datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc),
)


def test_encoded_payload_decodes_to_same_fields():
    """Encoding then decoding preserves ticket and metadata fields."""
    encoded = encode_ticket_payload(payload_for(TICKET))
    decoded = decode_ticket_payload(encoded)

    assert decoded.ticket_id == TICKET.ticket_id
    assert decoded.event_id == "event-1"
    assert decoded.user_id == "user-1"
    assert decoded.issued_at == TICKET.issued_at


def test_encoded_payload_is_url_safe_without_padding():
    encoded = encode_ticket_payload(payload_for(TICKET))
    assert "=" not in encoded
    assert "+" not in encoded and "/" not in encoded


def test_decode_accepts_raw_json_from_legacy_scanner():
    """Legacy QR codes embed plain JSON with camelCase keys and extra display fields."""
    scanned = json.dumps({
        "ticketId": "TICKET-legacy",
        "userName": "Ada",
        "eventTitle": "Alumni Reunion",
        "validatedAt": None,
    })
    decoded = decode_ticket_payload(scanned)
    assert decoded.ticket_id == "TICKET-legacy"
    assert decoded.event_id is None


@pytest.mark.parametrize("scanned", ["", "   ", "not-base64-!!!", "{not json", "[1, 2, 3]"])
def test_decode_rejects_garbage(scanned):
    with pytest.raises(InvalidTicketError):
        decode_ticket_payload(scanned)


def test_decode_rejects_payload_without_ticket_id():
    raw = base64.urlsafe_b64encode(json.dumps({"v": 1, "event_id": "e"}).encode()).decode()
    with pytest.raises(InvalidTicketError):
        decode_ticket_payload(raw)


def test_decode_rejects_unknown_version():
    payload = TicketPayload(v=2, ticket_id="TICKET-x")
    with pytest.raises(InvalidTicketError, match="version"):
        decode_ticket_payload(encode_ticket_payload(payload))
