"""Tests for GET /bootscript."""

import pytest
from tests.conftest import KERNEL, bootparams_body

NODE = "x3000c0s0b0n0"  # 10.1.0.1, groups compute,rack1


async def _create(app_client, id: str, **body):
    resp = await app_client.post("/bootparams", params={"id": id}, json=bootparams_body(**body))
    assert resp.status_code == 201


@pytest.mark.asyncio
async def test_bootscript_by_id(app_client):
    await _create(app_client, NODE, params="console=ttyS0")

    resp = await app_client.get("/bootscript", params={"id": NODE})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/plain")

    lines = resp.text.splitlines()
    assert lines[0] == "#!ipxe"
    assert lines[1] == f"kernel --name kernel {KERNEL} console=ttyS0 || goto boot_retry"
    assert lines[-1].startswith("chain ")


@pytest.mark.asyncio
async def test_bootscript_retry_and_arch(app_client):
    await _create(app_client, NODE)
    resp = await app_client.get("/bootscript", params={"id": NODE, "retry": 2, "arch": "x86_64"})
    assert resp.text.rstrip("\n").endswith("/bootscript?retry=2&arch=x86_64")


@pytest.mark.asyncio
@pytest.mark.parametrize("retry", ["many", "1_0", "2.0"])
async def test_bootscript_bad_retry_returns_400(app_client, retry):
    await _create(app_client, NODE)
    resp = await app_client.get("/bootscript", params={"id": NODE, "retry": retry})
    assert resp.status_code == 400
    assert resp.json()["error"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_bootscript_unknown_node_returns_404(app_client):
    resp = await app_client.get("/bootscript", params={"id": "x9999c0s0b0n0"})
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_bootscript_from_forwarded_ip(app_client):
    await _create(app_client, NODE, params="from-ip")
    resp = await app_client.get("/bootscript", headers={"X-Forwarded-For": "10.1.0.1, 192.168.0.1"})
    assert resp.status_code == 200
    assert "from-ip" in resp.text


@pytest.mark.asyncio
async def test_bootscript_unknown_ip_returns_422(app_client):
    resp = await app_client.get("/bootscript", headers={"X-Forwarded-For": "10.200.0.1"})
    assert resp.status_code == 422
    assert resp.json()["error"] == "UNPROCESSABLE"


@pytest.mark.asyncio
async def test_bootscript_merges_group_templates(app_client):
    await app_client.post(
        "/bootparams", params={"id": "compute-tmpl"}, json=bootparams_body(params="console=ttyS0")
    )
    await app_client.put("/groups/compute/template", json={"id": "compute-tmpl"})
    await app_client.post(
        "/bootparams",
        params={"id": "rack-tmpl"},
        json=bootparams_body(kernel="http://other/k", params="quiet"),
    )
    await app_client.put("/groups/rack1/template", json={"id": "rack-tmpl"})

    resp = await app_client.get("/bootscript", params={"id": NODE})
    assert resp.status_code == 200
    kernel_line = resp.text.splitlines()[1]
    assert kernel_line == f"kernel --name kernel {KERNEL} console=ttyS0 quiet || goto boot_retry"


@pytest.mark.asyncio
async def test_bootscript_v1_prefix(app_client):
    await _create(app_client, NODE)
    resp = await app_client.get("/boot/v1/bootscript", params={"id": NODE})
    assert resp.status_code == 200
    assert resp.text.startswith("#!ipxe\n")
