"""Group template binding models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class GroupTemplate(BaseModel):
    """Snapshot binding of a group to one concrete (identifier, version)."""

    paramId: str
    version: int = Field(ge=1)


class AssignTemplateRequest(BaseModel):
    id: str = Field(min_length=1)
    version: int = 0


class GroupTemplateResponse(BaseModel):
    group: str
    id: str
    version: int


class GroupListResponse(BaseModel):
    groups: list[GroupTemplateResponse]
