from __future__ import annotations

from enum import StrEnum

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, true
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.core.database import Base


class MenuType(StrEnum):
    DASHBOARD = "Dashboard"
    MASTER = "Master"
    TRANSACTION = "Transaction"
    REPORTS = "Reports"
    SETTING = "Setting"


MENU_TYPE_ORDER = {member.value: rank for rank, member in enumerate(MenuType)}


class Module(Base):
    __tablename__ = "portal_module"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    icon_path: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())

    menus: Mapped[list[Menu]] = relationship("Menu", back_populates="module")


class Menu(Base):
    __tablename__ = "portal_menu"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    module_id: Mapped[int] = mapped_column(Integer, ForeignKey("portal_module.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    menu_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    redirect_page: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())

    module: Mapped[Module] = relationship("Module", back_populates="menus")
    submenus: Mapped[list[Submenu]] = relationship("Submenu", back_populates="menu")

    __table_args__ = (Index("ix_portal_menu_module_active", "module_id", "is_active"),)


class Submenu(Base):
    __tablename__ = "portal_submenu"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    menu_id: Mapped[int] = mapped_column(Integer, ForeignKey("portal_menu.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    redirect_page: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())

    menu: Mapped[Menu] = relationship("Menu", back_populates="submenus")


class UserRight(Base):
    """Entitlement record.

    Type-scoped grants leave ``user_id`` empty and apply to every user of the
    role type. User-scoped grants name a user and usually a submenu.
    """

    __tablename__ = "portal_user_right"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("portal_user.id", ondelete="CASCADE"), nullable=True)
    role_type: Mapped[str] = mapped_column(String(1), nullable=False)
    company_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("portal_company.id"), nullable=True)
    module_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("portal_module.id"), nullable=True)
    submenu_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("portal_submenu.id"), nullable=True)

    __table_args__ = (
        Index("ix_portal_user_right_user_company", "user_id", "company_id", "role_type"),
        Index("ix_portal_user_right_module", "module_id", "role_type"),
    )
