"""Watch the inventory file and reload it on change."""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path

from watchfiles import Change, awatch

from netboot_bss.adapters.inventory import InventoryAdapter

logger = logging.getLogger(__name__)

_MAX_RETRIES = 3
_RETRY_DELAY_S = 0.2
_COOLDOWN_S = 5.0


class WatcherService:
    """Reload the inventory adapter whenever its CSV changes on disk."""

    def __init__(self, inventory: InventoryAdapter, debounce_ms: int = 500):
        self._inventory = inventory
        self._debounce_ms = debounce_ms
        self._cooldown_until = 0.0
        self._task: asyncio.Task | None = None

    async def start(self) -> None:
        """Start watching in background."""
        self._task = asyncio.create_task(self._watch_loop(), name="inventory-watcher")
        logger.info("WatcherService started (debounce=%dms)", self._debounce_ms)

    async def stop(self) -> None:
        """Stop watching."""
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("WatcherService stopped")

    async def _watch_loop(self) -> None:
        path = self._inventory.path
        if path is None:
            logger.warning("No inventory path configured for watching")
            return

        # Watch the parent directory so replacements and renames are seen
        watch_dir = str(Path(path).parent)
        logger.info("Watching %s", watch_dir)

        try:
            async for changes in awatch(watch_dir, debounce=self._debounce_ms, step=100):
                for change_type, changed in changes:
                    if change_type == Change.deleted:
                        continue
                    await self.handle_change(changed)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Watcher loop error")

    async def handle_change(self, changed: str) -> bool:
        """Reload the inventory if ``changed`` is the inventory file.

        Returns True when a reload happened.
        """
        path = self._inventory.path
        if path is None or Path(changed) != Path(path):
            return False

        if time.monotonic() < self._cooldown_until:
            logger.debug("Skipping %s (in cooldown)", changed)
            return False

        for attempt in range(1, _MAX_RETRIES + 1):
            if self._inventory.load():
                logger.info("Reloaded inventory after file change")
                return True
            logger.warning("Reload attempt %d/%d failed for %s", attempt, _MAX_RETRIES, changed)
            if attempt < _MAX_RETRIES:
                await asyncio.sleep(_RETRY_DELAY_S)

        # Persistent failure: keep the old inventory, back off for a while
        logger.warning(
            "All %d retries failed for %s, setting %ds cooldown",
            _MAX_RETRIES,
            changed,
            _COOLDOWN_S,
        )
        self._cooldown_until = time.monotonic() + _COOLDOWN_S
        return False
