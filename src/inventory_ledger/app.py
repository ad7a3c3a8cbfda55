"""FastAPI application factory."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from . import __version__
from .config import get_settings
from .database import init_database
from .errors import (
    AccessDeniedError,
    ConflictError,
    InvalidStateError,
    InventoryError,
    NotFoundError,
    ValidationError,
)
from .logging_setup import configure_logging
from .routes import api_router

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[InventoryError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    # missing and foreign sessions look the same to the caller
    (AccessDeniedError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (InvalidStateError, status.HTTP_409_CONFLICT),
)


def _status_for(exc: InventoryError) -> int:
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


async def _inventory_error_handler(request: Request, exc: InventoryError) -> JSONResponse:
    code = _status_for(exc)
    logger.info("%s %s -> %s: %s", request.method, request.url.path, code, exc)
    return JSONResponse(status_code=code, content={"detail": str(exc), "error": type(exc).__name__})


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = get_settings()
    configure_logging(settings.log_level)
    init_database()

    app = FastAPI(title=settings.app_name, version=__version__)
    app.add_exception_handler(InventoryError, _inventory_error_handler)
    app.include_router(api_router, prefix=settings.api_prefix)
    return app
