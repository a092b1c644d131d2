"""iPXE boot script endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse

from netboot_bss.bootscript import generate_boot_script
from netboot_bss.dependencies import get_inventory, get_settings, get_store, parse_int_query
from netboot_bss.exceptions import NotFoundError, UnprocessableError
from netboot_bss.services.resolution import resolve_boot_params

logger = logging.getLogger(__name__)

router = APIRouter(tags=["bootscript"])


def client_ip(request: Request, trust_proxy: bool) -> str:
    """Get client IP, respecting X-Forwarded-For only if trust_proxy=True."""
    if trust_proxy:
        forwarded = request.headers.get("X-Forwarded-For", "")
        if forwarded:
            # First entry is the original client
            return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return ""


@router.get("/bootscript", response_class=PlainTextResponse)
async def get_bootscript(
    request: Request,
    id: str | None = Query(None, description="Node identifier; resolved from the client IP if omitted"),
    retry: str | None = Query(None),
    arch: str = Query(""),
    store=Depends(get_store),
    inventory=Depends(get_inventory),
    settings=Depends(get_settings),
) -> PlainTextResponse:
    retry_count = parse_int_query(retry, "retry") or 0

    node_id = id
    if not node_id:
        ip = client_ip(request, settings.trust_proxy_headers)
        try:
            node_id = inventory.id_from_ip(ip)
        except NotFoundError as exc:
            raise UnprocessableError(f"Cannot identify node for address {ip or 'unknown'}") from exc
        logger.info("Node %s with ip %s found", node_id, ip)

    params = await resolve_boot_params(store, inventory, node_id)
    script = generate_boot_script(params, retry_count, arch)
    return PlainTextResponse(content=script)
