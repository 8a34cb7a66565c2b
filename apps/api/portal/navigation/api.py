from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from portal.core.auth import get_session_context
from portal.core.config import Settings, get_settings
from portal.core.database import get_db
from portal.navigation.schemas import MenuRead, ModuleRead
from portal.navigation.service import EntitlementEvaluator
from portal.platform.security.context import SessionContext
from portal.platform.security.errors import BadRequest


router = APIRouter(tags=["navigation"])

entitlement_evaluator = EntitlementEvaluator()


@router.get("/modules", response_model=list[ModuleRead])
def list_modules(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    ctx: SessionContext = Depends(get_session_context),
) -> list[ModuleRead]:
    return entitlement_evaluator.list_modules(db, settings, ctx)


@router.get("/menus", response_model=list[MenuRead])
def list_menus(
    module_id: int | None = Query(default=None, alias="moduleId"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    ctx: SessionContext = Depends(get_session_context),
) -> list[MenuRead]:
    if module_id is None:
        raise BadRequest("Module ID is required")
    return entitlement_evaluator.list_menus(db, settings, ctx, module_id)
