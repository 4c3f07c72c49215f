"""
Engine factory.
Wires the lifecycle controller to its store and hands out the process-wide instance.
"""

from typing import Optional

from rsvp_engine.core.config import get_settings
from rsvp_engine.infrastructure.memory_store import InMemoryStore
from rsvp_engine.services.lifecycle import EventLifecycleController


def build_controller() -> EventLifecycleController:
    """Build a controller backed by a fresh in-memory store."""
    return EventLifecycleController(InMemoryStore(), settings=get_settings())


# Singleton instance
_controller: Optional[EventLifecycleController] = None

def get_controller() -> EventLifecycleController:
    """Get controller singleton. Used as a FastAPI dependency."""
    global _controller
    if _controller is None:
        _controller = build_controller()
    return _controller


def reset_controller() -> None:
    global _controller
    _controller = None
