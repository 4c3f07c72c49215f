"""
Tests for RSVP transitions, capacity accounting and reminder defaults.
"""

import pytest

from rsvp_engine.core.errors import CapacityExceededError, EventNotFoundError, ValidationError
from rsvp_engine.models import RsvpStatus


def test_first_rsvp_creates_attendance(controller, open_event):
    view = controller.rsvp(open_event.id, "user-1", "interested")

    assert view.rsvp_status is RsvpStatus.INTERESTED
    assert view.reminder_enabled is False
    assert view.ticket is None
    assert view.attendance.responded_at is not None


def test_untouched_attendance_reads_as_not_going(controller, store, open_event):
    """getAttendance returns a zero-value record without persisting it."""
    view = controller.get_attendance(open_event.id, "stranger")

    assert view.rsvp_status is RsvpStatus.NOT_GOING
    assert view.reminder_enabled is False
    assert store.get_attendance(open_event.id, "stranger") is None


def test_rsvp_going_twice_is_idempotent(controller, ticketed_event):
    """Re-sending going keeps the same state and does not mint a second ticket."""
    first = controller.rsvp(ticketed_event.id, "user-1", "going")
    second = controller.rsvp(ticketed_event.id, "user-1", "going")

    assert second.rsvp_status is RsvpStatus.GOING
    assert second.ticket.ticket_id == first.ticket.ticket_id
    assert second.reminder_enabled is True
    assert controller.attendance_summary(ticketed_event.id).going == 1


def test_unknown_status_is_rejected(controller, open_event):
    with pytest.raises(ValidationError):
        controller.rsvp(open_event.id, "user-1", "maybe")


def test_rsvp_unknown_event(controller):
    with pytest.raises(EventNotFoundError):
        controller.rsvp("no-such-event", "user-1", "going")


def test_scenario_capacity_two_third_user_rejected(controller, ticketed_event):
    """Capacity 2: first two going RSVPs get tickets, the third is refused."""
    t1 = controller.rsvp(ticketed_event.id, "user-1", "going").ticket
    t2 = controller.rsvp(ticketed_event.id, "user-2", "going").ticket

    assert t1 is not None and t2 is not None
    assert t1.ticket_id != t2.ticket_id

    with pytest.raises(CapacityExceededError) as exc_info:
        controller.rsvp(ticketed_event.id, "user-3", "going")
    assert exc_info.value.capacity == 2


def test_capacity_rejection_leaves_state_unchanged(controller, store, ticketed_event):
    controller.rsvp(ticketed_event.id, "user-1", "going")
    controller.rsvp(ticketed_event.id, "user-2", "going")
    controller.rsvp(ticketed_event.id, "user-3", "interested")

    with pytest.raises(CapacityExceededError):
        controller.rsvp(ticketed_event.id, "user-3", "going")

    view = controller.get_attendance(ticketed_event.id, "user-3")
    assert view.rsvp_status is RsvpStatus.INTERESTED
    assert view.reminder_enabled is False
    assert store.count_going(ticketed_event.id) == 2


def test_going_user_at_capacity_can_reassert_going(controller, ticketed_event):
    """The caller's own row is excluded from the count, so re-RSVPing at a full event succeeds."""
    controller.rsvp(ticketed_event.id, "user-1", "going")
    controller.rsvp(ticketed_event.id, "user-2", "going")

    view = controller.rsvp(ticketed_event.id, "user-2", "going")
    assert view.rsvp_status is RsvpStatus.GOING


def test_leaving_going_frees_a_seat(controller, ticketed_event):
    controller.rsvp(ticketed_event.id, "user-1", "going")
    controller.rsvp(ticketed_event.id, "user-2", "going")
    controller.rsvp(ticketed_event.id, "user-1", "not_going")

    view = controller.rsvp(ticketed_event.id, "user-3", "going")
    assert view.rsvp_status is RsvpStatus.GOING

    summary = controller.attendance_summary(ticketed_event.id)
    assert summary.going == 2
    assert summary.remaining == 0


def test_unlimited_capacity(controller, open_event):
    for i in range(50):
        controller.rsvp(open_event.id, f"user-{i}", "going")

    summary = controller.attendance_summary(open_event.id)
    assert summary.going == 50
    assert summary.remaining is None


def test_unticketed_event_never_issues_tickets(controller, open_event):
    view = controller.rsvp(open_event.id, "user-1", "going")
    assert view.ticket is None
    assert view.attendance.live_ticket_id is None


def test_scenario_reminder_flag_follows_rsvp(controller, ticketed_event):
    """
    interested leaves the reminder at its default, going forces it on,
    not_going revokes the ticket but keeps the reminder, and the reminder
    can still be switched off while the event is upcoming.
    """
    view = controller.rsvp(ticketed_event.id, "user-1", "interested")
    assert view.reminder_enabled is False

    view = controller.rsvp(ticketed_event.id, "user-1", "going")
    assert view.reminder_enabled is True
    assert view.ticket is not None

    view = controller.rsvp(ticketed_event.id, "user-1", "not_going")
    assert view.rsvp_status is RsvpStatus.NOT_GOING
    assert view.ticket is None
    assert view.reminder_enabled is True

    view = controller.set_reminder(ticketed_event.id, "user-1", False)
    assert view.reminder_enabled is False


def test_going_forces_reminder_back_on(controller, open_event):
    controller.rsvp(open_event.id, "user-1", "going")
    controller.set_reminder(open_event.id, "user-1", False)

    view = controller.rsvp(open_event.id, "user-1", "going")
    assert view.reminder_enabled is True


def test_summary_counts_interested(controller, open_event):
    controller.rsvp(open_event.id, "user-1", "going")
    controller.rsvp(open_event.id, "user-2", "interested")
    controller.rsvp(open_event.id, "user-3", "interested")
    controller.rsvp(open_event.id, "user-4", "not_going")

    summary = controller.attendance_summary(open_event.id)
    assert summary.going == 1
    assert summary.interested == 2
