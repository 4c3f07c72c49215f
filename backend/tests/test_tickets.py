"""
Tests for ticket issuance, revocation and door-side validation.
"""

from datetime import timedelta

import pytest

from rsvp_engine.core.config import Settings
from rsvp_engine.core.errors import (
    InvalidStateError,
    InvalidTicketError,
    PermissionDeniedError,
    TicketAlreadyUsedError,
    TicketNotFoundError,
    TicketRevokedError,
)
from rsvp_engine.services.lifecycle import EventLifecycleController
from rsvp_engine.services.ticket_codec import decode_ticket_payload


def test_ticket_ids_are_prefixed_random_tokens(controller, ticketed_event):
    ticket = controller.rsvp(ticketed_event.id, "user-1", "going").ticket

    assert ticket.ticket_id.startswith("TICKET-")
    assert len(ticket.ticket_id) > len("TICKET-") + 16
    assert ticket.event_id == ticketed_event.id
    assert ticket.user_id == "user-1"
    assert ticket.validated_at is None


def test_scenario_check_in_then_reuse(controller, clock, ticketed_event, start_event):
    """First scan succeeds and stamps validated_at; the second scan is refused with that time."""
    t1 = controller.rsvp(ticketed_event.id, "user-1", "going").ticket
    start_event(ticketed_event)
    clock.advance(minutes=10)

    result = controller.validate_ticket(t1.ticket_id, ticketed_event.id)
    assert result.user_id == "user-1"
    assert result.ticket.validated_at == clock()

    clock.advance(minutes=5)
    with pytest.raises(TicketAlreadyUsedError) as exc_info:
        controller.validate_ticket(t1.ticket_id, ticketed_event.id)
    assert exc_info.value.validated_at == result.ticket.validated_at


def test_unknown_ticket_is_invalid(controller, ticketed_event, start_event):
    start_event(ticketed_event)
    with pytest.raises(InvalidTicketError):
        controller.validate_ticket("TICKET-forged", ticketed_event.id)


def test_ticket_from_another_event_is_invalid(controller, make_event, ticketed_event, start_event):
    other = make_event(title="Workshop", capacity=10, requires_ticket=True)
    ticket = controller.rsvp(other.id, "user-1", "going").ticket
    start_event(ticketed_event)

    with pytest.raises(InvalidTicketError):
        controller.validate_ticket(ticket.ticket_id, ticketed_event.id)


def test_scenario_revocation_and_reissue(controller, ticketed_event, start_event):
    """Leaving going revokes the ticket; coming back mints a new one and the old stays dead."""
    old = controller.rsvp(ticketed_event.id, "user-1", "going").ticket
    controller.rsvp(ticketed_event.id, "user-1", "interested")
    start_event(ticketed_event)

    with pytest.raises(TicketRevokedError):
        controller.validate_ticket(old.ticket_id, ticketed_event.id)

    new = controller.rsvp(ticketed_event.id, "user-1", "going").ticket
    assert new.ticket_id != old.ticket_id

    with pytest.raises(TicketRevokedError):
        controller.validate_ticket(old.ticket_id, ticketed_event.id)

    result = controller.validate_ticket(new.ticket_id, ticketed_event.id)
    assert result.ticket.ticket_id == new.ticket_id


def test_revoked_ticket_is_kept_for_audit(controller, store, ticketed_event):
    old = controller.rsvp(ticketed_event.id, "user-1", "going").ticket
    controller.rsvp(ticketed_event.id, "user-1", "not_going")

    assert store.get_ticket(old.ticket_id) == old


def test_check_in_requires_ongoing_event(controller, ticketed_event):
    ticket = controller.rsvp(ticketed_event.id, "user-1", "going").ticket

    with pytest.raises(InvalidStateError):
        controller.validate_ticket(ticket.ticket_id, ticketed_event.id)


def test_check_in_blocked_after_completion(controller, ticketed_event, start_event):
    ticket = controller.rsvp(ticketed_event.id, "user-1", "going").ticket
    start_event(ticketed_event)
    controller.tick(ticketed_event.ends_at)

    with pytest.raises(InvalidStateError):
        controller.validate_ticket(ticket.ticket_id, ticketed_event.id)
    assert controller.get_attendance(ticketed_event.id, "user-1").ticket.validated_at is None


def test_check_in_blocked_after_cancellation(controller, ticketed_event, start_event):
    ticket = controller.rsvp(ticketed_event.id, "user-1", "going").ticket
    start_event(ticketed_event)
    controller.cancel_event(ticketed_event.id, ticketed_event.organizer_id, "venue unavailable")

    with pytest.raises(InvalidStateError):
        controller.validate_ticket(ticket.ticket_id, ticketed_event.id)


def test_grace_window_allows_early_check_in(store, clock):
    settings = Settings(CHECKIN_GRACE_MINUTES=30)
    controller = EventLifecycleController(store, settings=settings, clock=clock)
    event = controller.create_event(
        organizer_id="org",
        title="Early Doors",
        starts_at=clock() + timedelta(hours=1),
        requires_ticket=True,
    )
    ticket = controller.rsvp(event.id, "user-1", "going").ticket

    clock.set(event.starts_at - timedelta(minutes=45))
    with pytest.raises(InvalidStateError):
        controller.validate_ticket(ticket.ticket_id, event.id)

    clock.set(event.starts_at - timedelta(minutes=20))
    result = controller.validate_ticket(ticket.ticket_id, event.id)
    assert result.ticket.validated_at == clock()


def test_only_organizer_may_scan(controller, ticketed_event, start_event):
    ticket = controller.rsvp(ticketed_event.id, "user-1", "going").ticket
    start_event(ticketed_event)

    with pytest.raises(PermissionDeniedError):
        controller.validate_ticket(ticket.ticket_id, ticketed_event.id, staff_id="user-2")

    result = controller.validate_ticket(
        ticket.ticket_id, ticketed_event.id, staff_id=ticketed_event.organizer_id
    )
    assert result.user_id == "user-1"


def test_get_ticket_returns_scannable_payload(controller, ticketed_event, start_event):
    issued = controller.rsvp(ticketed_event.id, "user-1", "going").ticket

    view = controller.get_ticket(ticketed_event.id, "user-1")
    assert view.ticket == issued
    payload = decode_ticket_payload(view.payload)
    assert payload.ticket_id == issued.ticket_id
    assert payload.event_id == ticketed_event.id

    start_event(ticketed_event)
    result = controller.check_in_payload(view.payload, ticketed_event.id)
    assert result.ticket.ticket_id == issued.ticket_id


def test_get_ticket_without_live_ticket(controller, ticketed_event):
    controller.rsvp(ticketed_event.id, "user-1", "interested")
    with pytest.raises(TicketNotFoundError):
        controller.get_ticket(ticketed_event.id, "user-1")


def test_check_in_with_garbage_payload(controller, ticketed_event, start_event):
    start_event(ticketed_event)
    with pytest.raises(InvalidTicketError):
        controller.check_in_payload("garbage", ticketed_event.id)
