"""Tests for the versioned /bootparams endpoints."""

import pytest
from tests.conftest import INITRD, KERNEL, bootparams_body


@pytest.mark.asyncio
async def test_create_returns_201_with_location(app_client):
    resp = await app_client.post("/bootparams", params={"id": "n1"}, json=bootparams_body())
    assert resp.status_code == 201
    assert resp.headers["Location"] == "/bootparams?id=n1"
    data = resp.json()
    assert data["version"] == 1
    assert data["kernel"] == KERNEL
    assert data["initrd"] == INITRD


@pytest.mark.asyncio
async def test_create_duplicate_returns_400(app_client):
    await app_client.post("/bootparams", params={"id": "n1"}, json=bootparams_body())
    resp = await app_client.post("/bootparams", params={"id": "n1"}, json=bootparams_body())
    assert resp.status_code == 400
    assert resp.json()["error"] == "ALREADY_EXISTS"


@pytest.mark.asyncio
async def test_create_requires_id(app_client):
    resp = await app_client.post("/bootparams", json=bootparams_body())
    assert resp.status_code == 400
    assert "id" in resp.json()["message"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"kernel": KERNEL},
        {"initrd": INITRD},
        {"kernel": KERNEL, "initrd": INITRD, "rootfs": {"type": "iscsi"}},
    ],
)
async def test_create_invalid_body_returns_400(app_client, body):
    resp = await app_client.post("/bootparams", params={"id": "n1"}, json=body)
    assert resp.status_code == 400
    assert resp.json()["error"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_create_malformed_json_returns_400(app_client):
    resp = await app_client.post(
        "/bootparams",
        params={"id": "n1"},
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json()["details"]["errors"]


@pytest.mark.asyncio
async def test_wire_names_round_trip(app_client):
    body = bootparams_body(
        rootfs={"type": "nfs", "server": "10.0.0.1", "path": "/nfsroot"},
        **{"cloud-init": {"url": "http://ci/"}},
    )
    await app_client.post("/bootparams", params={"id": "n1"}, json=body)

    data = (await app_client.get("/bootparams", params={"id": "n1"})).json()
    assert data["rootfs"]["server"] == "10.0.0.1"
    assert data["cloud-init"]["url"] == "http://ci/"
    assert "rootFS" not in data


@pytest.mark.asyncio
async def test_update_and_get_versions(app_client):
    await app_client.post("/bootparams", params={"id": "n1"}, json=bootparams_body())
    resp = await app_client.put(
        "/bootparams", params={"id": "n1"}, json=bootparams_body(kernel="http://boot/k2")
    )
    assert resp.status_code == 200
    assert resp.json()["version"] == 2

    current = (await app_client.get("/bootparams", params={"id": "n1"})).json()
    assert current["kernel"] == "http://boot/k2"

    first = (await app_client.get("/bootparams", params={"id": "n1", "version": 1})).json()
    assert first["kernel"] == KERNEL

    history = (await app_client.get("/bootparams/versions", params={"id": "n1"})).json()
    assert history["currentVersion"] == 2
    assert history["defaultVersion"] == 1
    assert [v["version"] for v in history["versions"]] == [1, 2]


@pytest.mark.asyncio
async def test_update_missing_returns_400(app_client):
    resp = await app_client.put("/bootparams", params={"id": "ghost"}, json=bootparams_body())
    assert resp.status_code == 400
    assert resp.json()["error"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_get_missing_returns_404(app_client):
    resp = await app_client.get("/bootparams", params={"id": "ghost"})
    assert resp.status_code == 404
    assert resp.json()["error"] == "NOT_FOUND"


@pytest.mark.asyncio
@pytest.mark.parametrize(("version", "status"), [("0", 400), ("2", 400), ("abc", 400)])
async def test_get_bad_version(app_client, version, status):
    await app_client.post("/bootparams", params={"id": "n1"}, json=bootparams_body())
    resp = await app_client.get("/bootparams", params={"id": "n1", "version": version})
    assert resp.status_code == status


@pytest.mark.asyncio
async def test_default_version(app_client):
    await app_client.post("/bootparams", params={"id": "n1"}, json=bootparams_body())
    await app_client.put("/bootparams", params={"id": "n1"}, json=bootparams_body(kernel="K2"))

    resp = await app_client.get("/bootparams/default", params={"id": "n1"})
    assert resp.json()["version"] == 1

    resp = await app_client.put("/bootparams/default", params={"id": "n1", "version": 2})
    assert resp.status_code == 200
    assert resp.json()["kernel"] == "K2"

    resp = await app_client.put("/bootparams/default", params={"id": "n1", "version": 9})
    assert resp.status_code == 400
    assert resp.json()["error"] == "INVALID_VERSION"

    resp = await app_client.put("/bootparams/default", params={"id": "n1"})
    assert resp.status_code == 400

    assert (await app_client.get("/bootparams/default", params={"id": "n1"})).json()["version"] == 2


@pytest.mark.asyncio
async def test_delete(app_client):
    await app_client.post("/bootparams", params={"id": "n1"}, json=bootparams_body())

    resp = await app_client.delete("/bootparams", params={"id": "n1"})
    assert resp.status_code == 204
    assert (await app_client.get("/bootparams", params={"id": "n1"})).status_code == 404

    # Idempotent
    resp = await app_client.delete("/bootparams", params={"id": "n1"})
    assert resp.status_code == 204


@pytest.mark.asyncio
async def test_v2_prefix_mount(app_client):
    resp = await app_client.post("/boot/v2/bootparams", params={"id": "n1"}, json=bootparams_body())
    assert resp.status_code == 201
    resp = await app_client.get("/bootparams", params={"id": "n1"})
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_request_id_echoed(app_client):
    resp = await app_client.get(
        "/bootparams", params={"id": "ghost"}, headers={"X-Request-ID": "abc123"}
    )
    assert resp.headers["X-Request-ID"] == "abc123"
