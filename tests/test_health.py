"""Tests for health and readiness endpoints."""

import pytest
from httpx import ASGITransport, AsyncClient

from netboot_bss.config import Settings
from netboot_bss.main import create_app


@pytest.mark.asyncio
async def test_health_returns_ok(app_client):
    resp = await app_client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["version"]
    assert data["uptime"] >= 0
    assert data["backend"] in ("mem", "sqlite")
    assert data["nodes"] == 4
    assert data["inventoryModified"] is not None


@pytest.mark.asyncio
async def test_ready_returns_ok(app_client):
    resp = await app_client.get("/ready")
    assert resp.status_code == 200
    assert resp.json()["ready"] is True


@pytest.mark.asyncio
async def test_missing_inventory_degraded_and_not_ready(tmp_path):
    settings = Settings(
        storage_backend="mem",
        inventory_csv_path=tmp_path / "missing.csv",
        log_level="WARNING",
    )
    app = create_app(settings=settings)

    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            health = await client.get("/health")
            assert health.json()["status"] == "degraded"
            assert health.json()["inventoryModified"] is None

            ready = await client.get("/ready")
            assert ready.status_code == 503
            assert ready.json()["ready"] is False
            assert "missing.csv" in ready.json()["reason"]


@pytest.mark.asyncio
async def test_no_inventory_configured():
    app = create_app(settings=Settings(storage_backend="mem", log_level="WARNING"))

    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            health = (await client.get("/health")).json()
            assert health["status"] == "ok"
            assert health["nodes"] == 0
            assert health["inventoryModified"] is None
            assert (await client.get("/ready")).status_code == 200
