"""Group template binding endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from netboot_bss.dependencies import get_store, parse_json_body
from netboot_bss.models.bootparams import BootParams
from netboot_bss.models.group import AssignTemplateRequest, GroupListResponse, GroupTemplateResponse

router = APIRouter(prefix="/groups", tags=["groups"])


@router.get("", response_model=GroupListResponse)
async def list_groups(store=Depends(get_store)) -> GroupListResponse:
    bindings = await store.list_groups()
    return GroupListResponse(
        groups=[
            GroupTemplateResponse(group=group, id=t.paramId, version=t.version)
            for group, t in bindings.items()
        ]
    )


@router.put("/{group}/template", response_model=GroupTemplateResponse)
async def assign_template(
    group: str,
    request: Request,
    store=Depends(get_store),
) -> GroupTemplateResponse:
    body = await parse_json_body(request, AssignTemplateRequest)
    binding = await store.assign_template_to_group(body.id, group, body.version)
    return GroupTemplateResponse(group=group, id=binding.paramId, version=binding.version)


@router.get("/{group}/template", response_model=BootParams, response_model_exclude_none=True)
async def get_template(group: str, store=Depends(get_store)) -> BootParams:
    return await store.get_template_for_group(group)
