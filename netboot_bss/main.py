"""FastAPI application factory with lifespan context manager."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from netboot_bss.config import Settings
from netboot_bss.exceptions import register_exception_handlers

logger = logging.getLogger(__name__)

_start_time: float = 0.0


def get_uptime() -> int:
    """Return process uptime in seconds."""
    return int(time.monotonic() - _start_time)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: open the store, load inventory, start watcher."""
    global _start_time
    _start_time = time.monotonic()

    settings: Settings = app.state.settings

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    from netboot_bss.adapters.inventory import InventoryAdapter
    from netboot_bss.store import create_store

    # --- Store ---
    store = create_store(settings)
    await store.open()
    app.state.store = store

    # --- Inventory ---
    inventory = InventoryAdapter(settings.inventory_csv_path)
    inventory.load()
    app.state.inventory = inventory

    # --- Watcher (only with an inventory file) ---
    watcher = None
    if settings.inventory_csv_path is not None:
        try:
            from netboot_bss.services.watcher import WatcherService

            watcher = WatcherService(inventory, debounce_ms=settings.watcher_debounce_ms)
            await watcher.start()
        except Exception:
            logger.warning("Inventory watcher could not start (non-fatal)", exc_info=True)
            watcher = None

    logger.info(
        "Netboot BSS started (backend=%s, %d nodes in inventory)",
        store.backend,
        len(inventory.nodes),
    )

    try:
        yield
    finally:
        if watcher:
            await watcher.stop()
        await store.close()
        logger.info("Netboot BSS stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = Settings()

    version = "1.0.0"
    version_file = Path(__file__).parent.parent / "VERSION"
    if version_file.exists():
        try:
            version = version_file.read_text().strip() or version
        except OSError:
            logger.warning("Could not read %s", version_file)

    from netboot_bss.models.error import ErrorResponse

    app = FastAPI(
        title="Netboot BSS",
        version=version,
        summary="Versioned boot parameters and iPXE boot scripts",
        lifespan=lifespan,
        responses={
            400: {"model": ErrorResponse},
            404: {"model": ErrorResponse},
            500: {"model": ErrorResponse},
        },
    )

    app.state.settings = settings
    app.state.version = version

    register_exception_handlers(app)

    from netboot_bss.middleware.request_log import RequestLogMiddleware

    app.add_middleware(RequestLogMiddleware)

    from netboot_bss.routers import bootparams, bootscript, groups, health, v1

    app.include_router(health.router)
    app.include_router(bootparams.router)
    app.include_router(groups.router)
    app.include_router(bootscript.router)
    app.include_router(v1.router)

    # Same handlers under the prefixes used by existing BSS clients
    app.include_router(bootparams.router, prefix="/boot/v2", include_in_schema=False)
    app.include_router(groups.router, prefix="/boot/v2", include_in_schema=False)
    app.include_router(bootscript.router, prefix="/boot/v2", include_in_schema=False)
    app.include_router(bootscript.router, prefix="/boot/v1", include_in_schema=False)
    app.include_router(v1.router, prefix="/boot/v1", include_in_schema=False)

    return app


# Default app instance for uvicorn
app = create_app()
