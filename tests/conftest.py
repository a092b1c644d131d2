"""Shared test fixtures for Netboot BSS."""

from __future__ import annotations

from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from netboot_bss.config import Settings
from netboot_bss.models.bootparams import BootParams, CloudInitServer, RootFS
from netboot_bss.store import MemoryStore, SQLiteStore

FIXTURES_DIR = Path(__file__).parent / "fixtures"

KERNEL = "http://boot.example.com/vmlinuz"
INITRD = "http://boot.example.com/initrd.img"


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture(params=["mem", "sqlite"])
def tmp_settings(request, tmp_path: Path) -> Settings:
    """Settings for both backends, data under tmp_path, fixture inventory."""
    return Settings(
        storage_backend=request.param,
        db_path=tmp_path / "bss.db",
        inventory_csv_path=FIXTURES_DIR / "inventory.csv",
        trust_proxy_headers=True,
        log_level="WARNING",
    )


@pytest_asyncio.fixture(params=["mem", "sqlite"])
async def store(request, tmp_path: Path):
    """An opened store of each backend; every store test runs against both."""
    if request.param == "mem":
        s = MemoryStore()
    else:
        s = SQLiteStore(tmp_path / "bss.db")
    await s.open()
    yield s
    await s.close()


@pytest.fixture
def sample_params() -> BootParams:
    return BootParams(kernel=KERNEL, initrd=INITRD, params="console=ttyS0,115200")


@pytest.fixture
def full_params() -> BootParams:
    """BootParams with every optional member set."""
    return BootParams(
        kernel=KERNEL,
        initrd=INITRD,
        params="console=ttyS0,115200 quiet",
        rootFS=RootFS(type="nfs", server="10.0.0.1", path="/nfsroot", options="vers=4,ro"),
        cloudInit=CloudInitServer(url="http://10.0.0.1:27777/", version="1"),
    )


@pytest_asyncio.fixture
async def app_client(tmp_settings: Settings):
    """AsyncClient backed by the real FastAPI app with test settings and lifespan."""
    from netboot_bss.main import create_app

    app = create_app(settings=tmp_settings)

    # Trigger lifespan startup/shutdown
    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


def bootparams_body(kernel: str = KERNEL, initrd: str = INITRD, **extra) -> dict:
    """JSON body for the bootparams endpoints."""
    return {"kernel": kernel, "initrd": initrd, **extra}
