"""
Structured logging configuration using structlog.

The engine's own loggers (the `rsvp_engine` namespace) log at LOG_LEVEL;
everything else stays at WARNING unless DEBUG is on. Uvicorn's access log is
silenced because RequestLoggingMiddleware already logs every request.
"""

import logging
import sys
import structlog
from rsvp_engine.core.config import Settings, get_settings

APP_LOGGER = "rsvp_engine"

# Third-party loggers and the level they are held at
THIRD_PARTY_LEVELS = {
    "uvicorn.error": logging.INFO,
    "uvicorn.access": logging.WARNING,
}


def _service_context(settings: Settings):
    def add_service(logger, method_name, event_dict):
        event_dict.setdefault("service", settings.APP_NAME)
        event_dict.setdefault("environment", settings.ENVIRONMENT)
        return event_dict

    return add_service


def setup_logging() -> None:
    settings = get_settings()

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.ENVIRONMENT == "production":
        shared_processors.append(_service_context(settings))
        shared_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(logging.DEBUG if settings.DEBUG else logging.WARNING)

    logging.getLogger(APP_LOGGER).setLevel(
        getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    )
    for name, level in THIRD_PARTY_LEVELS.items():
        logging.getLogger(name).setLevel(level)


def get_logger(name: str = APP_LOGGER) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
