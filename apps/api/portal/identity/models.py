from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint, false, true
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserStatus(StrEnum):
    ACTIVE = "active"
    DISABLED = "disabled"


class UserCategory(StrEnum):
    INTERNAL = "I"
    EXTERNAL = "E"


class User(Base):
    __tablename__ = "portal_user"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    login: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role_type: Mapped[str] = mapped_column(String(1), nullable=False)
    category: Mapped[str] = mapped_column(String(1), nullable=False, default=UserCategory.EXTERNAL.value)
    mobile_no: Mapped[str | None] = mapped_column(String(15), nullable=True, unique=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)
    employee_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=UserStatus.ACTIVE.value)
    created_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, onupdate=utcnow)

    memberships: Mapped[list[UserCompany]] = relationship("UserCompany", back_populates="user")

    __table_args__ = (Index("ix_portal_user_login_status", "login", "status"),)


class Company(Base):
    __tablename__ = "portal_company"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    memberships: Mapped[list[UserCompany]] = relationship("UserCompany", back_populates="company")


class UserCompany(Base):
    __tablename__ = "portal_user_company"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("portal_user.id", ondelete="CASCADE"), nullable=False)
    company_id: Mapped[int] = mapped_column(Integer, ForeignKey("portal_company.id", ondelete="CASCADE"), nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())

    user: Mapped[User] = relationship("User", back_populates="memberships")
    company: Mapped[Company] = relationship("Company", back_populates="memberships")

    __table_args__ = (
        UniqueConstraint("user_id", "company_id", name="uq_portal_user_company"),
        Index("ix_portal_user_company_default", "user_id", "is_default", "is_active"),
    )
