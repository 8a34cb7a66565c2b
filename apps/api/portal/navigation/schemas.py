from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModuleRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    icon_path: str | None = None


class SubmenuRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    redirect_page: str | None = None


class MenuRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    module_id: int
    name: str
    menu_type: str | None = None
    redirect_page: str | None = None
    submenus: list[SubmenuRead] = Field(default_factory=list)
