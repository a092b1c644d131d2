"""Legacy (V1) bulk boot parameter endpoints."""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, Query, Request, Response

from netboot_bss.dependencies import get_inventory, get_store, parse_json_body, require_query
from netboot_bss.exceptions import NotFoundError, ValidationError
from netboot_bss.models.bootparams import BootParamsV1, V1AddResponse, validate_boot_params

logger = logging.getLogger(__name__)

router = APIRouter(tags=["v1"])

REFERRAL_TOKEN_HEADER = "BSS-Referral-Token"


@router.api_route(
    "/bootparameters",
    methods=["PUT", "POST"],
    status_code=201,
    response_model=V1AddResponse,
)
async def add_boot_parameters(
    request: Request,
    response: Response,
    store=Depends(get_store),
    inventory=Depends(get_inventory),
) -> V1AddResponse:
    v1 = await parse_json_body(request, BootParamsV1)

    if v1.nids is not None:
        raise ValidationError("NIDs not supported")
    if not v1.hosts and not v1.macs:
        raise ValidationError("at least one of hosts or macs must be specified")
    validate_boot_params(v1)

    hosts = list(v1.hosts or [])
    bad_macs: list[str] = []
    for mac in v1.macs or []:
        try:
            hosts.append(inventory.id_from_mac(mac))
        except NotFoundError:
            bad_macs.append(mac)

    token = str(uuid.uuid4())
    record = v1.model_copy(deep=True)
    record.referralToken = token
    for xname in hosts:
        await store.set_v1(xname, record)

    logger.info("Stored V1 boot parameters for %d host(s), %d unresolved MAC(s)", len(hosts), len(bad_macs))
    response.headers[REFERRAL_TOKEN_HEADER] = token
    return V1AddResponse(hosts=hosts, bad_macs=bad_macs)


@router.get("/bootparameters", response_model=BootParamsV1, response_model_exclude_none=True)
async def get_boot_parameters(
    name: str | None = Query(None, description="Hardware identifier (xname)"),
    store=Depends(get_store),
) -> BootParamsV1:
    return await store.get_v1(require_query(name, "name"))
