"""
Event RSVP Engine - Main Application Entry Point

HTTP surface over the RSVP, capacity and ticketing engine:
- Per-event locking for capacity-safe RSVPs and status changes
- Single-use tickets with compare-and-set check-in
- Scheduler-driven lifecycle ticks and reminder sweeps
- Structured logging with request correlation and Prometheus metrics
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rsvp_engine.core.config import get_settings
from rsvp_engine.core.logging import setup_logging, get_logger
from rsvp_engine.core.metrics import metrics_endpoint
from rsvp_engine.api.errors import register_exception_handlers
from rsvp_engine.api.router import api_router
from rsvp_engine.api.middleware import RequestLoggingMiddleware
from rsvp_engine.services.engine_factory import get_controller

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()
    logger = get_logger(__name__)

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    # Build the engine before the thread pool starts serving requests
    get_controller()

    yield

    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Event RSVP, capacity and ticketing engine",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)

app.include_router(api_router)


@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint for Docker and load balancers."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
