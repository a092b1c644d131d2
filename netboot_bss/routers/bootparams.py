"""Versioned boot parameter endpoints."""

from __future__ import annotations

from urllib.parse import quote

from fastapi import APIRouter, Depends, Query, Request, Response

from netboot_bss.dependencies import get_store, parse_int_query, parse_json_body, require_query
from netboot_bss.exceptions import AppError, NotFoundError, ValidationError
from netboot_bss.models.bootparams import BootParams, VersionedBootParams, validate_boot_params

router = APIRouter(tags=["bootparams"])


async def _parse_body(request: Request) -> BootParams:
    params = await parse_json_body(request, BootParams)
    validate_boot_params(params)
    return params


@router.post(
    "/bootparams",
    status_code=201,
    response_model=BootParams,
    response_model_exclude_none=True,
)
async def create_boot_params(
    request: Request,
    response: Response,
    id: str | None = Query(None, description="Identifier (node or template name)"),
    store=Depends(get_store),
) -> BootParams:
    node_id = require_query(id, "id")
    params = await _parse_body(request)

    created = await store.set(node_id, params)
    response.headers["Location"] = f"/bootparams?id={quote(node_id, safe='')}"
    return created


@router.put("/bootparams", response_model=BootParams, response_model_exclude_none=True)
async def update_boot_params(
    request: Request,
    id: str | None = Query(None),
    store=Depends(get_store),
) -> BootParams:
    node_id = require_query(id, "id")
    params = await _parse_body(request)

    try:
        return await store.update(node_id, params)
    except NotFoundError as exc:
        raise AppError(exc.error, exc.message, 400) from exc


@router.get("/bootparams", response_model=BootParams, response_model_exclude_none=True)
async def get_boot_params(
    id: str | None = Query(None),
    version: str | None = Query(None, description="Specific version; current if omitted"),
    store=Depends(get_store),
) -> BootParams:
    node_id = require_query(id, "id")
    v = parse_int_query(version, "version")
    if v is None:
        return await store.get(node_id)
    return await store.get_version(node_id, v)


@router.delete("/bootparams", status_code=204)
async def delete_boot_params(
    id: str | None = Query(None),
    store=Depends(get_store),
) -> Response:
    await store.delete(require_query(id, "id"))
    return Response(status_code=204)


@router.get("/bootparams/default", response_model=BootParams, response_model_exclude_none=True)
async def get_default_boot_params(
    id: str | None = Query(None),
    store=Depends(get_store),
) -> BootParams:
    return await store.get_default(require_query(id, "id"))


@router.put("/bootparams/default", response_model=BootParams, response_model_exclude_none=True)
async def set_default_boot_params(
    id: str | None = Query(None),
    version: str | None = Query(None),
    store=Depends(get_store),
) -> BootParams:
    node_id = require_query(id, "id")
    v = parse_int_query(version, "version")
    if v is None:
        raise ValidationError("version query parameter is required")

    await store.set_default(node_id, v)
    return await store.get_default(node_id)


@router.get(
    "/bootparams/versions",
    response_model=VersionedBootParams,
    response_model_exclude_none=True,
)
async def list_boot_param_versions(
    id: str | None = Query(None),
    store=Depends(get_store),
) -> VersionedBootParams:
    return await store.list_versions(require_query(id, "id"))
