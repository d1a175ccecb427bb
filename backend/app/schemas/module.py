"""Pydantic schemas for the branch modules endpoints."""

from pydantic import Field

from app.schemas.setup import CamelModel, ModuleSelection


class ModuleOut(CamelModel):
    code: str
    name: str
    description: str
    icon: str
    is_core: bool
    is_enabled: bool


class ModulesOut(CamelModel):
    branch_id: str
    modules: list[ModuleOut]


class ModulesUpdate(CamelModel):
    modules: list[ModuleSelection] = Field(..., min_length=1)
    user_id: int | str | None = None
