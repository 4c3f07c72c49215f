"""
Endpoints driven by the external scheduler: lifecycle tick and reminder sweep.

Both require the scheduler token. A caller-supplied `now` may trail the
engine's clock but not run ahead of it by more than the configured skew,
unless SCHEDULER_ALLOW_TIME_OVERRIDE is set.
"""

from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query

from rsvp_engine.api.deps import require_scheduler
from rsvp_engine.core.config import Settings, get_settings
from rsvp_engine.core.errors import ValidationError
from rsvp_engine.core.logging import get_logger
from rsvp_engine.schemas.attendance import ReminderTargetResponse
from rsvp_engine.schemas.event import StatusTransitionResponse, TickRequest, TickResponse
from rsvp_engine.services.engine_factory import get_controller
from rsvp_engine.services.lifecycle import EventLifecycleController

logger = get_logger(__name__)
router = APIRouter(
    prefix="/scheduler",
    tags=["Scheduler"],
    dependencies=[Depends(require_scheduler)],
)


def _checked_now(
    requested: Optional[datetime],
    controller: EventLifecycleController,
    settings: Settings,
) -> Optional[datetime]:
    if requested is None or settings.SCHEDULER_ALLOW_TIME_OVERRIDE:
        return requested
    if requested.tzinfo is None:
        raise ValidationError("`now` must be timezone-aware")

    skew = timedelta(seconds=settings.SCHEDULER_MAX_CLOCK_SKEW_SECONDS)
    if requested - controller.now() > skew:
        logger.warning("scheduler_clock_ahead", requested=requested.isoformat())
        raise ValidationError(
            "`now` is ahead of the engine clock",
            max_skew_seconds=settings.SCHEDULER_MAX_CLOCK_SKEW_SECONDS,
        )
    return requested


@router.post("/tick", response_model=TickResponse)
def tick_endpoint(
    tick: Optional[TickRequest] = None,
    controller: EventLifecycleController = Depends(get_controller),
    settings: Settings = Depends(get_settings),
):
    """Advance event statuses against wall-clock time (or the supplied `now`)."""
    now = _checked_now(tick.now if tick else None, controller, settings)
    transitions = controller.tick(now)
    return TickResponse(
        transitions=[StatusTransitionResponse.model_validate(t) for t in transitions]
    )


@router.get("/reminders", response_model=list[ReminderTargetResponse])
def due_reminders_endpoint(
    now: Optional[datetime] = Query(None),
    controller: EventLifecycleController = Depends(get_controller),
    settings: Settings = Depends(get_settings),
):
    """Attendances the notifier should remind about events starting within the window."""
    targets = controller.due_reminders(_checked_now(now, controller, settings))
    logger.info("reminder_sweep", due=len(targets))
    return targets
