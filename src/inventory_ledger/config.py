"""Application configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

_ENV_PREFIX = "INVENTORY_LEDGER_"

# upper bound of one barcode batch; the environment may only lower it
BATCH_SIZE_CEILING = 1000


def _env(name: str, default: str) -> str:
    return os.environ.get(f"{_ENV_PREFIX}{name}", default)


def _default_data_root() -> Path:
    """Return the platform specific directory used for persistent data."""

    if os.name == "nt":
        base = Path(os.environ.get("LOCALAPPDATA", Path.home()))
        return base / "InventoryLedger"
    return Path.home() / ".inventory_ledger"


def _default_database_path() -> Path:
    """Resolve the database path taking overrides into account."""

    override = os.environ.get(f"{_ENV_PREFIX}DB")
    if override:
        return Path(override).expanduser()
    return _default_data_root() / "ledger.sqlite3"


@dataclass(slots=True)
class Settings:
    """Runtime configuration loaded from environment variables."""

    app_name: str = field(default_factory=lambda: _env("APP_NAME", "Inventory Ledger"))
    host: str = field(default_factory=lambda: _env("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(_env("PORT", "8000")))
    reload: bool = field(default_factory=lambda: _env("RELOAD", "false").lower() == "true")
    log_level: str = field(default_factory=lambda: _env("LOG_LEVEL", "info"))
    api_prefix: str = field(default_factory=lambda: _env("API_PREFIX", "/api/v1"))
    database_path: Path = field(default_factory=_default_database_path)
    database_url: str | None = field(default_factory=lambda: os.environ.get(f"{_ENV_PREFIX}DATABASE_URL"))
    default_reorder_level: int = field(default_factory=lambda: int(_env("DEFAULT_REORDER_LEVEL", "10")))
    max_batch_size: int = field(
        default_factory=lambda: min(int(_env("MAX_BATCH_SIZE", str(BATCH_SIZE_CEILING))), BATCH_SIZE_CEILING)
    )
    default_page_size: int = field(default_factory=lambda: int(_env("DEFAULT_PAGE_SIZE", "50")))
    max_page_size: int = field(default_factory=lambda: int(_env("MAX_PAGE_SIZE", "200")))

    @property
    def sqlalchemy_url(self) -> str:
        """Database URL handed to SQLAlchemy."""

        return self.database_url or f"sqlite:///{self.database_path}"

    def ensure_storage(self) -> None:
        """Ensure that the database directory exists."""

        if not self.database_url:
            self.database_path.parent.mkdir(parents=True, exist_ok=True)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    settings = Settings()
    settings.ensure_storage()
    return settings
