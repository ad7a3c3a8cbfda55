"""Logging configuration shared by the API and the CLI."""

from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_PACKAGE_LOGGER = "inventory_ledger"


def configure_logging(level: str | int = "info") -> logging.Logger:
    """Attach a stream handler to the package logger, once."""

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(_PACKAGE_LOGGER)
    logger.setLevel(level)
    if not any(getattr(h, "_inventory_ledger", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._inventory_ledger = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
