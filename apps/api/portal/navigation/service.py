from __future__ import annotations

import logging
from collections import defaultdict

from opentelemetry import trace
from sqlalchemy.orm import Session

from portal.core.config import Settings
from portal.metrics import observe_navigation_decision
from portal.navigation.models import MENU_TYPE_ORDER, Menu, Module, Submenu
from portal.navigation.repository import NavigationRepository
from portal.navigation.schemas import MenuRead, ModuleRead, SubmenuRead
from portal.otel import set_session_attributes
from portal.platform.security.context import RoleType, SessionContext
from portal.platform.security.errors import AccessDenied

logger = logging.getLogger("portal.navigation")
tracer = trace.get_tracer("portal.navigation")

navigation_repository = NavigationRepository()


def _menu_sort_key(menu: Menu) -> tuple[int, str, int]:
    rank = MENU_TYPE_ORDER.get(menu.menu_type or "", len(MENU_TYPE_ORDER))
    return rank, menu.name.lower(), menu.id


def _to_menu_read(menu: Menu, submenus: list[Submenu]) -> MenuRead:
    return MenuRead(
        id=menu.id,
        module_id=menu.module_id,
        name=menu.name,
        menu_type=menu.menu_type,
        redirect_page=menu.redirect_page,
        submenus=[SubmenuRead.model_validate(item) for item in sorted(submenus, key=lambda s: s.id)],
    )


class EntitlementEvaluator:
    """Decides which modules, menus and submenus a session may see.

    Superusers see every active item regardless of company. Admins see
    modules they hold an Admin grant for, scoped by ``admin_rights_scope``.
    Users see only submenus granted to them in the active company, and the
    menus and modules those submenus hang under. Unknown role types see no
    modules and are refused menus.
    """

    def __init__(self, repository: NavigationRepository | None = None) -> None:
        self.repository = repository or navigation_repository

    def list_modules(self, session: Session, settings: Settings, ctx: SessionContext) -> list[ModuleRead]:
        with tracer.start_as_current_span("navigation.modules.list") as span:
            set_session_attributes(span, ctx)
            rows = self._visible_modules(session, settings, ctx)
            span.set_attribute("portal.module_count", len(rows))

        observe_navigation_decision(ctx.role_type.name.lower(), "modules", "allowed" if rows else "empty")
        return [ModuleRead.model_validate(row) for row in rows]

    def list_menus(self, session: Session, settings: Settings, ctx: SessionContext, module_id: int) -> list[MenuRead]:
        with tracer.start_as_current_span("navigation.menus.list") as span:
            set_session_attributes(span, ctx)
            span.set_attribute("portal.module_id", module_id)
            try:
                menus = self._visible_menus(session, settings, ctx, module_id)
            except AccessDenied as exc:
                observe_navigation_decision(ctx.role_type.name.lower(), "menus", "denied")
                logger.info(
                    "navigation.menus_denied",
                    extra={
                        "user_id": ctx.user_id,
                        "role_type": ctx.role_type.value,
                        "company_id": ctx.company_id,
                        "module_id": module_id,
                        "reason": exc.message,
                    },
                )
                raise
            span.set_attribute("portal.menu_count", len(menus))

        observe_navigation_decision(ctx.role_type.name.lower(), "menus", "allowed")
        return menus

    def _visible_modules(self, session: Session, settings: Settings, ctx: SessionContext) -> list[Module]:
        if ctx.role_type is RoleType.SUPERUSER:
            return self.repository.list_active_modules(session)
        if ctx.role_type is RoleType.ADMIN:
            if settings.admin_rights_scope == "per_company" and ctx.company_id is None:
                return []
            return self.repository.list_admin_modules(
                session, settings.admin_rights_scope, ctx.user_id, ctx.company_id
            )
        if ctx.role_type is RoleType.USER:
            if ctx.company_id is None:
                return []
            return self.repository.list_user_modules(session, ctx.user_id, ctx.company_id)
        return []

    def _visible_menus(
        self, session: Session, settings: Settings, ctx: SessionContext, module_id: int
    ) -> list[MenuRead]:
        if ctx.role_type is RoleType.SUPERUSER:
            return self._full_menu_tree(session, module_id)

        if ctx.role_type is RoleType.ADMIN:
            if settings.admin_rights_scope == "per_company" and ctx.company_id is None:
                raise AccessDenied("No company associated with this session")
            if not self.repository.admin_has_module_rights(
                session, settings.admin_rights_scope, module_id, ctx.user_id, ctx.company_id
            ):
                raise AccessDenied("Access denied: no rights for this module")
            return self._full_menu_tree(session, module_id)

        if ctx.role_type is RoleType.USER:
            if ctx.company_id is None:
                raise AccessDenied("No company associated with this session")
            menus = self._permitted_menu_tree(session, module_id, ctx.user_id, ctx.company_id)
            if not menus:
                raise AccessDenied("Access denied: no permitted menus in this module")
            return menus

        raise AccessDenied("Access denied: unrecognised role type")

    def _full_menu_tree(self, session: Session, module_id: int) -> list[MenuRead]:
        menus = self.repository.list_active_menus(session, module_id)
        by_menu: dict[int, list[Submenu]] = defaultdict(list)
        for submenu in self.repository.list_active_submenus(session, [menu.id for menu in menus]):
            by_menu[submenu.menu_id].append(submenu)

        # A menu without submenus is only useful if it links somewhere itself.
        visible = [menu for menu in menus if by_menu.get(menu.id) or menu.redirect_page]
        return [_to_menu_read(menu, by_menu.get(menu.id, [])) for menu in sorted(visible, key=_menu_sort_key)]

    def _permitted_menu_tree(self, session: Session, module_id: int, user_id: int, company_id: int) -> list[MenuRead]:
        menus: dict[int, Menu] = {}
        by_menu: dict[int, list[Submenu]] = defaultdict(list)
        for menu, submenu in self.repository.list_permitted_submenus(session, module_id, user_id, company_id):
            menus[menu.id] = menu
            by_menu[menu.id].append(submenu)
        return [_to_menu_read(menu, by_menu[menu.id]) for menu in sorted(menus.values(), key=_menu_sort_key)]
