from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text, false, true
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimePeriod(Base):
    """Subscription window. The newest row decides whether the portal is expired."""

    __tablename__ = "portal_time_period"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class Notification(Base):
    __tablename__ = "portal_notification"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    to_user_id: Mapped[int] = mapped_column(Integer, ForeignKey("portal_user.id", ondelete="CASCADE"), nullable=False)
    from_user_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("portal_user.id"), nullable=True)
    company_id: Mapped[int] = mapped_column(Integer, ForeignKey("portal_company.id"), nullable=False)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (Index("ix_portal_notification_inbox", "to_user_id", "company_id", "id"),)


class ContactEntry(Base):
    __tablename__ = "portal_contact"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_id: Mapped[int] = mapped_column(Integer, ForeignKey("portal_company.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    mobile: Mapped[str | None] = mapped_column(String(20), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    remark: Mapped[str | None] = mapped_column(String(500), nullable=True)


class NamePrefix(Base):
    __tablename__ = "portal_name_prefix"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(20), nullable=False)


class Employee(Base):
    __tablename__ = "portal_employee"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name_prefix_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("portal_name_prefix.id"), nullable=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    middle_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())

    name_prefix: Mapped[NamePrefix | None] = relationship("NamePrefix")


class Theme(Base):
    __tablename__ = "portal_theme"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    navbar_bg: Mapped[str] = mapped_column(String(32), nullable=False)
    sidebar_bg: Mapped[str] = mapped_column(String(32), nullable=False)
    module_bg: Mapped[str] = mapped_column(String(32), nullable=False)
    footer_bg: Mapped[str] = mapped_column(String(32), nullable=False)
    menu_submenu_bg: Mapped[str] = mapped_column(String(32), nullable=False)
    current_module_color: Mapped[str] = mapped_column(String(32), nullable=False)
    menu_type_color: Mapped[str] = mapped_column(String(32), nullable=False)
    navbar_font_color: Mapped[str] = mapped_column(String(32), nullable=False)
    menu_header_bg: Mapped[str] = mapped_column(String(32), nullable=False)


class UserTheme(Base):
    __tablename__ = "portal_user_theme"

    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("portal_user.id", ondelete="CASCADE"), primary_key=True)
    theme_id: Mapped[int] = mapped_column(Integer, ForeignKey("portal_theme.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
