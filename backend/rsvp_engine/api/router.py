"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from rsvp_engine.api.routes import events, attendance, tickets, scheduler

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(events.router)
api_router.include_router(attendance.router)
api_router.include_router(tickets.router)
api_router.include_router(scheduler.router)
