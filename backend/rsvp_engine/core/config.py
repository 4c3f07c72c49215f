"""
Application configuration using pydantic-settings.
All config is loaded from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Event RSVP Engine"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Lifecycle
    DEFAULT_EVENT_DURATION_HOURS: int = 2
    CANCELLATION_REASON_MIN_LENGTH: int = 5

    # Ticketing
    TICKET_ID_PREFIX: str = "TICKET-"
    CHECKIN_GRACE_MINUTES: int = 0  # 0 = check-in only while ongoing

    # Reminders
    REMINDER_WINDOW_HOURS: int = 24

    # Scheduler endpoints (disabled while no token is set)
    SCHEDULER_TOKEN: Optional[str] = None
    SCHEDULER_MAX_CLOCK_SKEW_SECONDS: int = 60
    SCHEDULER_ALLOW_TIME_OVERRIDE: bool = False  # trust any `now` the caller sends

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
    }


@lru_cache()
def get_settings() -> Settings:
    return Settings()
