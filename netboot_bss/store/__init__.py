"""Boot parameter stores and backend selection."""

from __future__ import annotations

from typing import TYPE_CHECKING

from netboot_bss.store.base import Store
from netboot_bss.store.memory import MemoryStore
from netboot_bss.store.sqlite import SQLiteStore

if TYPE_CHECKING:
    from netboot_bss.config import Settings


def create_store(settings: Settings) -> Store:
    """Build the store selected by ``settings.storage_backend`` (not yet opened)."""
    if settings.storage_backend == "mem":
        return MemoryStore()
    if settings.storage_backend == "sqlite":
        return SQLiteStore(settings.db_path)
    raise ValueError(f"Unsupported storage backend: {settings.storage_backend}")


__all__ = [
    "MemoryStore",
    "SQLiteStore",
    "Store",
    "create_store",
]
