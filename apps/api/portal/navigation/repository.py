from __future__ import annotations

from collections.abc import Sequence
from typing import Literal

from sqlalchemy import ColumnElement, and_, or_, select
from sqlalchemy.orm import Session

from portal.navigation.models import Menu, Module, Submenu, UserRight
from portal.platform.security.context import RoleType

AdminRightsScope = Literal["global", "per_company"]


def _admin_rights_predicate(scope: AdminRightsScope, user_id: int, company_id: int | None) -> ColumnElement[bool]:
    predicate = UserRight.role_type == RoleType.ADMIN.value
    if scope == "global":
        return predicate
    return and_(
        predicate,
        UserRight.company_id == company_id,
        or_(UserRight.user_id == user_id, UserRight.user_id.is_(None)),
    )


def _user_rights_predicate(user_id: int, company_id: int) -> ColumnElement[bool]:
    return and_(
        UserRight.user_id == user_id,
        UserRight.company_id == company_id,
        UserRight.role_type == RoleType.USER.value,
    )


class NavigationRepository:
    def list_active_modules(self, session: Session) -> list[Module]:
        stmt = select(Module).where(Module.is_active.is_(True)).order_by(Module.name.asc(), Module.id.asc())
        return list(session.scalars(stmt).all())

    def list_admin_modules(
        self, session: Session, scope: AdminRightsScope, user_id: int, company_id: int | None
    ) -> list[Module]:
        stmt = (
            select(Module)
            .join(UserRight, UserRight.module_id == Module.id)
            .where(Module.is_active.is_(True), _admin_rights_predicate(scope, user_id, company_id))
            .distinct()
            .order_by(Module.name.asc(), Module.id.asc())
        )
        return list(session.scalars(stmt).all())

    def list_user_modules(self, session: Session, user_id: int, company_id: int) -> list[Module]:
        stmt = (
            select(Module)
            .join(Menu, Menu.module_id == Module.id)
            .join(Submenu, Submenu.menu_id == Menu.id)
            .join(UserRight, UserRight.submenu_id == Submenu.id)
            .where(
                Module.is_active.is_(True),
                Menu.is_active.is_(True),
                Submenu.is_active.is_(True),
                _user_rights_predicate(user_id, company_id),
            )
            .distinct()
            .order_by(Module.name.asc(), Module.id.asc())
        )
        return list(session.scalars(stmt).all())

    def admin_has_module_rights(
        self, session: Session, scope: AdminRightsScope, module_id: int, user_id: int, company_id: int | None
    ) -> bool:
        stmt = (
            select(UserRight.id)
            .where(UserRight.module_id == module_id, _admin_rights_predicate(scope, user_id, company_id))
            .limit(1)
        )
        return session.scalar(stmt) is not None

    def list_active_menus(self, session: Session, module_id: int) -> list[Menu]:
        stmt = (
            select(Menu)
            .join(Module, Module.id == Menu.module_id)
            .where(Menu.module_id == module_id, Menu.is_active.is_(True), Module.is_active.is_(True))
            .order_by(Menu.id.asc())
        )
        return list(session.scalars(stmt).all())

    def list_active_submenus(self, session: Session, menu_ids: Sequence[int]) -> list[Submenu]:
        if not menu_ids:
            return []
        stmt = (
            select(Submenu)
            .where(Submenu.menu_id.in_(menu_ids), Submenu.is_active.is_(True))
            .order_by(Submenu.id.asc())
        )
        return list(session.scalars(stmt).all())

    def list_permitted_submenus(
        self, session: Session, module_id: int, user_id: int, company_id: int
    ) -> list[tuple[Menu, Submenu]]:
        stmt = (
            select(Menu, Submenu)
            .join(Submenu, Submenu.menu_id == Menu.id)
            .join(Module, Module.id == Menu.module_id)
            .join(UserRight, UserRight.submenu_id == Submenu.id)
            .where(
                Menu.module_id == module_id,
                Module.is_active.is_(True),
                Menu.is_active.is_(True),
                Submenu.is_active.is_(True),
                _user_rights_predicate(user_id, company_id),
            )
            .distinct()
            .order_by(Menu.id.asc(), Submenu.id.asc())
        )
        return [(menu, submenu) for menu, submenu in session.execute(stmt).all()]
