"""FastAPI dependency injection via Depends(), plus query parsing helpers."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, TypeVar

from fastapi import Request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from netboot_bss.exceptions import ValidationError

if TYPE_CHECKING:
    from netboot_bss.adapters.inventory import InventoryAdapter
    from netboot_bss.config import Settings
    from netboot_bss.store.base import Store

ModelT = TypeVar("ModelT", bound=BaseModel)

_INT_RE = re.compile(r"[+-]?[0-9]+")


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_inventory(request: Request) -> InventoryAdapter:
    return request.app.state.inventory


def require_query(value: str | None, name: str) -> str:
    """Return ``value`` or raise a 400 naming the missing parameter."""
    if not value:
        raise ValidationError(f"{name} query parameter is required")
    return value


def parse_int_query(value: str | None, name: str) -> int | None:
    """Parse an optional integer query parameter; malformed input is a 400."""
    if value is None or value == "":
        return None
    if not _INT_RE.fullmatch(value):
        raise ValidationError(f"Invalid {name} parameter: {value!r}")
    return int(value)


async def parse_json_body(request: Request, model: type[ModelT]) -> ModelT:
    """Validate the raw request body against ``model``.

    Malformed JSON and schema violations are reported as a 400 with the
    individual pydantic errors flattened into ``details.errors``.
    """
    body = await request.body()
    try:
        return model.model_validate_json(body)
    except PydanticValidationError as exc:
        errors = []
        for err in exc.errors():
            loc = ".".join(str(p) for p in err.get("loc", ()))
            errors.append(f"{loc}: {err['msg']}" if loc else err["msg"])
        raise ValidationError("Invalid request body", details={"errors": errors}) from None
