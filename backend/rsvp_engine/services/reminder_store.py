"""
Reminder flag store.

Attendees toggle a per-event reminder flag; an external notifier reads the
due set once a day. Delivery itself happens outside the engine.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from rsvp_engine.core.errors import InvalidStateError
from rsvp_engine.core.logging import get_logger
from rsvp_engine.models import Attendance, Event, RsvpStatus
from rsvp_engine.services.interfaces.store import EngineStore

logger = get_logger(__name__)

# Attendees in these states get reminders when their flag is on
REMINDABLE_STATUSES = (RsvpStatus.GOING, RsvpStatus.INTERESTED)


@dataclass(frozen=True)
class ReminderTarget:
    event_id: str
    user_id: str
    rsvp_status: RsvpStatus
    starts_at: datetime


class ReminderFlagStore:
    def __init__(self, store: EngineStore, clock: Callable[[], datetime]):
        self._store = store
        self._clock = clock

    def set_reminder(self, event: Event, user_id: str, enabled: bool) -> Attendance:
        """Flip the flag. Caller must hold the event lock and have checked the event is active."""
        attendance = self._store.get_attendance(event.id, user_id)
        if attendance is None:
            raise InvalidStateError(
                "You are not registered for this event",
                event_id=event.id,
            )

        updated = attendance.with_reminder(enabled, self._clock())
        self._store.save_attendance(updated)
        logger.info("reminder_toggled", event_id=event.id, user_id=user_id, enabled=enabled)
        return updated

    def due_reminders(self, now: datetime, window: timedelta) -> list[ReminderTarget]:
        """
        Attendances the notifier should remind now.

        An attendance is due when its flag is on, it is going or interested,
        its event is still active, and the event starts within `window`
        (strictly in the future).
        """
        due = []
        for event_id in self._store.list_event_ids():
            with self._store.locked(event_id):
                event = self._store.get_event(event_id)
                if event is None or not event.status.is_active:
                    continue
                until_start = event.starts_at - now
                if not timedelta(0) < until_start <= window:
                    continue
                for attendance in self._store.list_attendances(event_id):
                    if attendance.reminder_enabled and attendance.rsvp_status in REMINDABLE_STATUSES:
                        due.append(
                            ReminderTarget(
                                event_id=event_id,
                                user_id=attendance.user_id,
                                rsvp_status=attendance.rsvp_status,
                                starts_at=event.starts_at,
                            )
                        )
        return due
