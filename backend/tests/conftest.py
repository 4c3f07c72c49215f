"""
Pytest fixtures for the engine, a controllable clock, and the HTTP client.

Each test gets a fresh in-memory store, so there is nothing to clean up
between tests. Time only moves when a test advances the clock.
"""

from datetime import datetime, timezone, timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from rsvp_engine.core.config import Settings, get_settings
from rsvp_engine.infrastructure.memory_store import InMemoryStore
from rsvp_engine.main import app
from rsvp_engine.models import Event
from rsvp_engine.services.engine_factory import get_controller
from rsvp_engine.services.lifecycle import EventLifecycleController

BASE_TIME = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
ORGANIZER = "organizer-1"
SCHEDULER_TOKEN = "test-scheduler-token"


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = BASE_TIME):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now

    def set(self, now: datetime) -> datetime:
        self.now = now
        return now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        CHECKIN_GRACE_MINUTES=0,
        CANCELLATION_REASON_MIN_LENGTH=5,
        SCHEDULER_TOKEN=SCHEDULER_TOKEN,
        SCHEDULER_ALLOW_TIME_OVERRIDE=False,
    )


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def controller(store: InMemoryStore, settings: Settings, clock: FakeClock) -> EventLifecycleController:
    return EventLifecycleController(store, settings=settings, clock=clock)


@pytest.fixture
def make_event(controller: EventLifecycleController):
    """Factory for events starting one day after BASE_TIME, lasting two hours."""

    def _make(**overrides) -> Event:
        params = dict(
            organizer_id=ORGANIZER,
            title="Alumni Reunion",
            starts_at=BASE_TIME + timedelta(days=1),
            ends_at=BASE_TIME + timedelta(days=1, hours=2),
            capacity=0,
            requires_ticket=False,
        )
        params.update(overrides)
        return controller.create_event(**params)

    return _make


@pytest.fixture
def ticketed_event(make_event) -> Event:
    """Ticketed event with two seats."""
    return make_event(capacity=2, requires_ticket=True, ticket_price="15.00")


@pytest.fixture
def open_event(make_event) -> Event:
    """Unticketed event with unlimited capacity."""
    return make_event(title="Open Webinar")


@pytest.fixture
def start_event(controller: EventLifecycleController, clock: FakeClock):
    """Move the clock to an event's start and tick it to ongoing."""

    def _start(event: Event) -> None:
        clock.set(event.starts_at)
        controller.tick(clock())

    return _start


@pytest_asyncio.fixture(scope="function")
async def client(
    controller: EventLifecycleController, settings: Settings
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client wired to the test controller and settings."""
    app.dependency_overrides[get_controller] = lambda: controller
    app.dependency_overrides[get_settings] = lambda: settings

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()

