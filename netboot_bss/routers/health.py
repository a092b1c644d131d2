"""Health and readiness endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from netboot_bss.models.health import HealthResponse, ReadyResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    from netboot_bss.main import get_uptime

    store = request.app.state.store
    inventory = request.app.state.inventory
    settings = request.app.state.settings

    status = "ok"
    if settings.inventory_csv_path is not None and not inventory.nodes:
        status = "degraded"

    return HealthResponse(
        status=status,
        version=request.app.state.version,
        uptime=get_uptime(),
        backend=store.backend,
        nodes=len(inventory.nodes),
        inventoryModified=inventory.last_modified,
    )


@router.get("/ready")
async def ready(request: Request) -> JSONResponse:
    settings = request.app.state.settings

    issues = []
    if settings.inventory_csv_path is not None and not settings.inventory_csv_path.exists():
        issues.append(f"inventory file not found: {settings.inventory_csv_path}")

    if issues:
        body = ReadyResponse(ready=False, reason="; ".join(issues))
        return JSONResponse(status_code=503, content=body.model_dump())

    return JSONResponse(status_code=200, content=ReadyResponse(ready=True).model_dump())
