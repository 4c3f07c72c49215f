"""
Maps engine errors onto HTTP responses.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from rsvp_engine.core.errors import EngineError
from rsvp_engine.core.logging import get_logger

logger = get_logger(__name__)


async def engine_error_handler(request: Request, exc: EngineError) -> JSONResponse:
    logger.info(
        "engine_error",
        code=exc.code.value,
        status_code=exc.status_code,
        detail=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EngineError, engine_error_handler)
