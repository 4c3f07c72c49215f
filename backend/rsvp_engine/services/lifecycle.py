"""
Event lifecycle controller: the single entry point for attendee-facing operations.

Every operation takes the event's lock, loads the event, checks that its
status permits the action, and only then calls the ledger, issuer, validator
or reminder store. Gate and mutation share one lock scope, so an organizer's
cancellation or a scheduler tick cannot slip in between "status looked fine"
and "RSVP was written".

Status transitions:

  upcoming --tick(now >= starts_at)--> ongoing --tick(now >= ends_at)--> completed
  upcoming | ongoing --cancel_event(reason)--> cancelled

completed and cancelled are terminal. update_event re-runs the tick rule
against the clock after an edit, so moving an event's times into the past
advances it at once; an edit never moves an event backwards.
"""

import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional, Union

from rsvp_engine.core.config import Settings, get_settings
from rsvp_engine.core.errors import (
    CapacityExceededError,
    EngineError,
    EventNotFoundError,
    InvalidStateError,
    PermissionDeniedError,
    TicketNotFoundError,
    ValidationError,
)
from rsvp_engine.core.logging import get_logger
from rsvp_engine.core.metrics import operation_latency, record_rsvp_attempt, record_transition
from rsvp_engine.models import Attendance, Event, EventStatus, Going, RsvpStatus, Ticket
from rsvp_engine.services.interfaces.store import EngineStore
from rsvp_engine.services.reminder_store import ReminderFlagStore, ReminderTarget
from rsvp_engine.services.rsvp_ledger import RsvpLedger
from rsvp_engine.services.ticket_codec import decode_ticket_payload, encode_ticket_payload, payload_for
from rsvp_engine.services.ticket_issuer import TicketIssuer
from rsvp_engine.services.ticket_validator import CheckInResult, TicketValidator

logger = get_logger(__name__)

EVENT_SORTS = ("upcoming", "latest", "popular")

# Statuses that put an event on a user's own list
MY_EVENT_STATUSES = (RsvpStatus.GOING, RsvpStatus.INTERESTED)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AttendanceView:
    """Attendance plus its live ticket, if any."""

    attendance: Attendance
    ticket: Optional[Ticket] = None

    @property
    def rsvp_status(self) -> RsvpStatus:
        return self.attendance.rsvp_status

    @property
    def reminder_enabled(self) -> bool:
        return self.attendance.reminder_enabled


@dataclass(frozen=True)
class TicketView:
    ticket: Ticket
    payload: str


@dataclass(frozen=True)
class StatusTransition:
    event_id: str
    from_status: EventStatus
    to_status: EventStatus
    at: datetime


@dataclass(frozen=True)
class AttendanceSummary:
    event_id: str
    going: int
    interested: int
    capacity: int
    remaining: Optional[int]  # None when capacity is unlimited


class EventLifecycleController:
    def __init__(
        self,
        store: EngineStore,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._store = store
        self._settings = settings or get_settings()
        self._clock = clock

        self._issuer = TicketIssuer(store, clock, prefix=self._settings.TICKET_ID_PREFIX)
        self._ledger = RsvpLedger(store, self._issuer, clock)
        self._validator = TicketValidator(
            store, clock, grace=timedelta(minutes=self._settings.CHECKIN_GRACE_MINUTES)
        )
        self._reminders = ReminderFlagStore(store, clock)

    # Organizer operations

    def create_event(
        self,
        organizer_id: str,
        title: str,
        starts_at: datetime,
        ends_at: Optional[datetime] = None,
        capacity: int = 0,
        requires_ticket: bool = False,
        ticket_price: Union[Decimal, int, str] = 0,
    ) -> Event:
        title = (title or "").strip()
        if not title:
            raise ValidationError("Title is required")
        if starts_at.tzinfo is None or (ends_at is not None and ends_at.tzinfo is None):
            raise ValidationError("Event times must be timezone-aware")
        if ends_at is None:
            ends_at = starts_at + timedelta(hours=self._settings.DEFAULT_EVENT_DURATION_HOURS)
        if ends_at <= starts_at:
            raise ValidationError("Event must end after it starts")
        if capacity < 0:
            raise ValidationError("Capacity cannot be negative")
        price = self._parse_price(ticket_price)

        event = Event(
            id=str(uuid.uuid4()),
            organizer_id=organizer_id,
            title=title,
            starts_at=starts_at,
            ends_at=ends_at,
            created_at=self._clock(),
            capacity=capacity,
            requires_ticket=requires_ticket,
            # Price is only meaningful for ticketed events
            ticket_price=price if requires_ticket else Decimal("0"),
        )
        self._store.save_event(event)

        logger.info(
            "event_created",
            event_id=event.id,
            organizer_id=organizer_id,
            capacity=capacity,
            requires_ticket=requires_ticket,
        )
        return event

    def get_event(self, event_id: str) -> Event:
        return self._require_event(event_id)

    def update_event(
        self,
        event_id: str,
        organizer_id: str,
        title: Optional[str] = None,
        starts_at: Optional[datetime] = None,
        ends_at: Optional[datetime] = None,
        capacity: Optional[int] = None,
        requires_ticket: Optional[bool] = None,
        ticket_price: Optional[Union[Decimal, int, str]] = None,
    ) -> Event:
        """
        Edit an upcoming or ongoing event. Organizer only.

        Fields left as None keep their current value. Moving the start without
        a new end keeps the event's duration. Capacity may not drop below the
        number of attendees already going (0 still means unlimited).

        Turning ticketing on mints a ticket for every going attendee; turning it
        off revokes their live tickets. After the edit the event is advanced
        against the clock exactly as tick() would.
        """
        if title is not None:
            title = title.strip()
            if not title:
                raise ValidationError("Title is required")
        for value in (starts_at, ends_at):
            if value is not None and value.tzinfo is None:
                raise ValidationError("Event times must be timezone-aware")
        if capacity is not None and capacity < 0:
            raise ValidationError("Capacity cannot be negative")
        price = self._parse_price(ticket_price) if ticket_price is not None else None

        with self._store.locked(event_id):
            event = self._require_event(event_id)
            if event.organizer_id != organizer_id:
                raise PermissionDeniedError("You are not authorized to edit this event")
            if event.status.is_terminal:
                raise InvalidStateError(
                    f"Cannot edit an event that is {event.status.value}",
                    event_id=event_id,
                    status=event.status.value,
                )

            new_starts = starts_at or event.starts_at
            if new_starts != event.starts_at and event.status is EventStatus.ONGOING:
                raise InvalidStateError(
                    "Cannot move the start of an event that has already started",
                    event_id=event_id,
                    status=event.status.value,
                )
            new_ends = ends_at or new_starts + (event.ends_at - event.starts_at)
            if new_ends <= new_starts:
                raise ValidationError("Event must end after it starts")

            going = self._store.count_going(event_id)
            new_capacity = event.capacity if capacity is None else capacity
            if new_capacity and new_capacity < going:
                raise ValidationError(
                    f"Capacity cannot be lower than the {going} attendees already going",
                    capacity=new_capacity,
                    going=going,
                )

            ticketed = event.requires_ticket if requires_ticket is None else requires_ticket
            if price is None:
                price = event.ticket_price

            updated = replace(
                event,
                title=title or event.title,
                starts_at=new_starts,
                ends_at=new_ends,
                capacity=new_capacity,
                requires_ticket=ticketed,
                ticket_price=price if ticketed else Decimal("0"),
            )
            if ticketed != event.requires_ticket:
                self._retoken_going(updated)

            status, applied = self._advance(updated, self._clock())
            updated = replace(updated, status=status)
            self._store.save_event(updated)

        logger.info(
            "event_updated",
            event_id=event_id,
            organizer_id=organizer_id,
            capacity=updated.capacity,
            requires_ticket=updated.requires_ticket,
            status=updated.status.value,
        )
        self._report_transitions(applied)
        return updated

    def list_events(
        self, status: Optional[Union[EventStatus, str]] = None, sort: str = "upcoming"
    ) -> list[Event]:
        """
        All events, optionally filtered by status.

        Sort orders: "upcoming" (soonest start first), "latest" (most recently
        created first), "popular" (most going, then most interested, then soonest).
        """
        if status is not None:
            try:
                status = EventStatus(status)
            except ValueError:
                allowed = ", ".join(s.value for s in EventStatus)
                raise ValidationError(f"Unknown event status {status!r}; expected one of {allowed}")
        if sort not in EVENT_SORTS:
            raise ValidationError(f"Unknown sort {sort!r}; expected one of {', '.join(EVENT_SORTS)}")

        events = [
            event
            for event in (self._store.get_event(event_id) for event_id in self._store.list_event_ids())
            if event is not None and (status is None or event.status is status)
        ]

        if sort == "latest":
            return sorted(events, key=lambda e: e.created_at, reverse=True)
        if sort == "popular":
            summaries = {e.id: self.attendance_summary(e.id) for e in events}
            return sorted(
                events,
                key=lambda e: (-summaries[e.id].going, -summaries[e.id].interested, e.starts_at),
            )
        return sorted(events, key=lambda e: e.starts_at)

    def list_events_for_user(self, user_id: str) -> list[Event]:
        """Events the user is going to or interested in, soonest first."""
        events = []
        for event_id in self._store.list_event_ids():
            attendance = self._store.get_attendance(event_id, user_id)
            if attendance is None or attendance.rsvp_status not in MY_EVENT_STATUSES:
                continue
            event = self._store.get_event(event_id)
            if event is not None:
                events.append(event)
        return sorted(events, key=lambda e: e.starts_at)

    def cancel_event(self, event_id: str, organizer_id: str, reason: str) -> Event:
        reason = (reason or "").strip()
        min_length = self._settings.CANCELLATION_REASON_MIN_LENGTH
        if len(reason) < max(min_length, 1):
            raise ValidationError(
                f"Cancellation reason must be at least {min_length} characters",
                min_length=min_length,
            )

        with self._store.locked(event_id):
            event = self._require_event(event_id)
            if event.organizer_id != organizer_id:
                raise PermissionDeniedError("You are not authorized to cancel this event")
            if event.status.is_terminal:
                raise InvalidStateError(
                    f"Cannot cancel an event that is {event.status.value}",
                    event_id=event_id,
                    status=event.status.value,
                )

            cancelled = replace(event, status=EventStatus.CANCELLED, cancellation_reason=reason)
            self._store.save_event(cancelled)
            record_transition(event.status.value, EventStatus.CANCELLED.value)

        logger.info("event_cancelled", event_id=event_id, previous=event.status.value, reason=reason)
        return cancelled

    # Scheduler operations

    def tick(self, now: Optional[datetime] = None) -> list[StatusTransition]:
        """
        Advance every event whose scheduled start or end has passed.

        Safe to call as often as the scheduler likes: events with no transition
        due are left alone, and terminal events never change.
        """
        now = now or self._clock()
        if now.tzinfo is None:
            raise ValidationError("tick() needs a timezone-aware timestamp")

        applied = []
        for event_id in self._store.list_event_ids():
            applied.extend(self.tick_event(event_id, now))

        if applied:
            logger.info("lifecycle_tick", transitions=len(applied), now=now.isoformat())
        return applied

    def tick_event(self, event_id: str, now: datetime) -> list[StatusTransition]:
        with self._store.locked(event_id):
            event = self._require_event(event_id)
            status, applied = self._advance(event, now)
            if applied:
                self._store.save_event(replace(event, status=status))

        self._report_transitions(applied)
        return applied

    def due_reminders(self, now: Optional[datetime] = None) -> list[ReminderTarget]:
        now = now or self._clock()
        if now.tzinfo is None:
            raise ValidationError("due_reminders() needs a timezone-aware timestamp")
        window = timedelta(hours=self._settings.REMINDER_WINDOW_HOURS)
        return self._reminders.due_reminders(now, window)

    # Attendee operations

    def rsvp(self, event_id: str, user_id: str, status: Union[RsvpStatus, str]) -> AttendanceView:
        new_status = self._parse_status(status)

        with operation_latency.labels(operation="rsvp").time():
            with self._store.locked(event_id):
                event = self._require_event(event_id)
                try:
                    self._require_active(event, action="RSVP")
                    attendance = self._ledger.set_status(event, user_id, new_status)
                except CapacityExceededError:
                    record_rsvp_attempt(new_status.value, "capacity_exceeded")
                    raise
                except EngineError:
                    record_rsvp_attempt(new_status.value, "rejected")
                    raise
                view = self._view(attendance)

        record_rsvp_attempt(new_status.value, "accepted")
        return view

    def set_reminder(self, event_id: str, user_id: str, enabled: bool) -> AttendanceView:
        with self._store.locked(event_id):
            event = self._require_event(event_id)
            self._require_active(event, action="change reminders")
            attendance = self._reminders.set_reminder(event, user_id, enabled)
            return self._view(attendance)

    def get_attendance(self, event_id: str, user_id: str) -> AttendanceView:
        with self._store.locked(event_id):
            self._require_event(event_id)
            return self._view(self._ledger.current(event_id, user_id))

    def get_ticket(self, event_id: str, user_id: str) -> TicketView:
        view = self.get_attendance(event_id, user_id)
        if view.ticket is None:
            raise TicketNotFoundError(event_id, user_id)
        return TicketView(ticket=view.ticket, payload=encode_ticket_payload(payload_for(view.ticket)))

    def attendance_summary(self, event_id: str) -> AttendanceSummary:
        with self._store.locked(event_id):
            event = self._require_event(event_id)
            attendances = self._store.list_attendances(event_id)
            going = self._store.count_going(event_id)

        interested = sum(1 for a in attendances if a.rsvp_status is RsvpStatus.INTERESTED)
        return AttendanceSummary(
            event_id=event_id,
            going=going,
            interested=interested,
            capacity=event.capacity,
            remaining=None if event.is_unlimited else max(event.capacity - going, 0),
        )

    # Door operations

    def validate_ticket(
        self, ticket_id: str, event_id: str, staff_id: Optional[str] = None
    ) -> CheckInResult:
        with operation_latency.labels(operation="validate_ticket").time():
            with self._store.locked(event_id):
                event = self._require_event(event_id)
                if staff_id is not None and staff_id != event.organizer_id:
                    raise PermissionDeniedError("Only event organizers can validate tickets")
                return self._validator.validate(ticket_id, event)

    def check_in_payload(
        self, scanned: str, event_id: str, staff_id: Optional[str] = None
    ) -> CheckInResult:
        payload = decode_ticket_payload(scanned)
        return self.validate_ticket(payload.ticket_id, event_id, staff_id=staff_id)

    def now(self) -> datetime:
        """The engine's clock reading."""
        return self._clock()

    # Helpers

    @staticmethod
    def _advance(event: Event, now: datetime) -> tuple[EventStatus, list[StatusTransition]]:
        """Status the event should have at `now`, and the transitions to get there."""
        applied = []
        status = event.status
        if status is EventStatus.UPCOMING and now >= event.starts_at:
            applied.append(StatusTransition(event.id, status, EventStatus.ONGOING, now))
            status = EventStatus.ONGOING
        if status is EventStatus.ONGOING and now >= event.ends_at:
            applied.append(StatusTransition(event.id, status, EventStatus.COMPLETED, now))
            status = EventStatus.COMPLETED
        return status, applied

    def _report_transitions(self, applied: list[StatusTransition]) -> None:
        for transition in applied:
            record_transition(transition.from_status.value, transition.to_status.value)
            logger.info(
                "event_status_advanced",
                event_id=transition.event_id,
                previous=transition.from_status.value,
                status=transition.to_status.value,
            )

    def _retoken_going(self, event: Event) -> None:
        """
        Bring going attendees in line with the event's ticketing flag.

        Caller must hold the event lock.
        """
        now = self._clock()
        for attendance in self._store.list_attendances(event.id):
            if not attendance.is_going:
                continue
            if event.requires_ticket:
                ticket_id = self._issuer.issue_if_eligible(event, attendance).ticket_id
            else:
                ticket_id = None
            self._store.save_attendance(attendance.with_state(Going(ticket_id=ticket_id), now))

    @staticmethod
    def _parse_price(ticket_price: Union[Decimal, int, str]) -> Decimal:
        try:
            price = Decimal(str(ticket_price))
        except InvalidOperation:
            raise ValidationError("Ticket price must be a number")
        if not price.is_finite() or price < 0:
            raise ValidationError("Ticket price cannot be negative")
        return price

    def _require_event(self, event_id: str) -> Event:
        event = self._store.get_event(event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    def _require_active(self, event: Event, action: str) -> None:
        if not event.status.is_active:
            raise InvalidStateError(
                f"Cannot {action} for an event that is {event.status.value}",
                event_id=event.id,
                status=event.status.value,
            )

    def _view(self, attendance: Attendance) -> AttendanceView:
        ticket_id = attendance.live_ticket_id
        ticket = self._store.get_ticket(ticket_id) if ticket_id else None
        return AttendanceView(attendance=attendance, ticket=ticket)

    @staticmethod
    def _parse_status(status: Union[RsvpStatus, str]) -> RsvpStatus:
        try:
            return RsvpStatus(status)
        except ValueError:
            allowed = ", ".join(s.value for s in RsvpStatus)
            raise ValidationError(f"Unknown RSVP status {status!r}; expected one of {allowed}")
