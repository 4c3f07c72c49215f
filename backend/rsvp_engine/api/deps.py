"""
Request dependencies shared by route modules.
"""

import secrets
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from rsvp_engine.core.config import Settings, get_settings
from rsvp_engine.core.logging import get_logger

logger = get_logger(__name__)

USER_ID_HEADER = "X-User-ID"
SCHEDULER_TOKEN_HEADER = "X-Scheduler-Token"


def get_current_user_id(x_user_id: Optional[str] = Header(None, alias=USER_ID_HEADER)) -> str:
    """
    Authenticated user id, as forwarded by the upstream identity proxy.

    The engine trusts this value; verifying credentials happens before the
    request reaches us.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return x_user_id.strip()


def require_scheduler(
    token: Optional[str] = Header(None, alias=SCHEDULER_TOKEN_HEADER),
    settings: Settings = Depends(get_settings),
) -> None:
    """Only the external scheduler, holding SCHEDULER_TOKEN, may drive ticks and sweeps."""
    if not settings.SCHEDULER_TOKEN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Scheduler endpoints are disabled",
        )
    if not token or not secrets.compare_digest(token, settings.SCHEDULER_TOKEN):
        logger.warning("scheduler_auth_failed", token_present=bool(token))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid scheduler token",
        )
