"""Application configuration via pydantic-settings."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Netboot BSS configuration.

    Loaded from environment variables with the ``BSS_`` prefix.
    """

    model_config = {"env_prefix": "BSS_"}

    # -- Storage -------------------------------------------------------------
    storage_backend: Literal["mem", "sqlite"] = "mem"
    db_path: Path = Path("/var/lib/netboot-bss/bss.db")

    # -- Inventory -----------------------------------------------------------
    inventory_csv_path: Path | None = None
    watcher_debounce_ms: int = 500
    trust_proxy_headers: bool = False

    # -- Misc ----------------------------------------------------------------
    log_level: str = "INFO"

    @field_validator("storage_backend", mode="before")
    @classmethod
    def _normalise_backend(cls, v: str) -> str:
        # "quack" and "sql" are accepted as aliases for the persistent backend
        if isinstance(v, str) and v.strip().lower() in ("quack", "sql"):
            logger.info("Storage backend %r maps to sqlite", v)
            return "sqlite"
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("log_level")
    @classmethod
    def _normalise_log_level(cls, v: str) -> str:
        return v.upper()
