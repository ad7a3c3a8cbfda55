"""Shared FastAPI dependencies."""

from __future__ import annotations

from typing import Generator

from sqlalchemy.orm import Session

from .config import get_settings
from .database import SessionLocal


def get_db() -> Generator[Session, None, None]:
    """Provide a database session for FastAPI routes."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def limit_param(limit: int | None = None) -> int:
    """Clamp a requested page size to the configured bounds."""

    settings = get_settings()
    if limit is None or limit <= 0:
        return settings.default_page_size
    return min(limit, settings.max_page_size)
