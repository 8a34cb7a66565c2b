from __future__ import annotations

import logging
import re
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.orm import Session, aliased

from portal.identity.models import User
from portal.platform.security.context import SessionContext
from portal.platform.security.errors import AccessDenied, BadRequest, NotFound
from portal.workspace.models import ContactEntry, Employee, NamePrefix, Notification, Theme, TimePeriod, UserTheme
from portal.workspace.schemas import (
    ContactRead,
    EmployeeOption,
    MessageResponse,
    NotificationRead,
    SubscriptionStatus,
    ThemeRead,
    ThemeSummary,
)

logger = logging.getLogger("portal.workspace")

NOTIFICATION_PAGE_SIZE = 50

_WHITESPACE_RE = re.compile(r"\s+")


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def format_full_name(prefix: str | None, first: str | None, middle: str | None, last: str | None) -> str:
    parts = [prefix or "", first or "", middle or "", last or ""]
    return _WHITESPACE_RE.sub(" ", " ".join(parts)).strip()


class SubscriptionService:
    def check(self, session: Session, *, now: datetime | None = None) -> SubscriptionStatus:
        period = session.scalar(select(TimePeriod).order_by(TimePeriod.id.desc()).limit(1))
        if period is None:
            return SubscriptionStatus(is_expired=True)

        end_at = _as_utc(period.end_at)
        is_expired = end_at < (now or datetime.now(timezone.utc))
        logger.info("subscription.checked", extra={"reason": "expired" if is_expired else "active"})
        return SubscriptionStatus(is_expired=is_expired, end_at=end_at)


class NotificationService:
    def list_inbox(self, session: Session, ctx: SessionContext) -> list[NotificationRead]:
        if ctx.company_id is None:
            return []
        sender = aliased(User)
        stmt = (
            select(Notification, sender.name)
            .outerjoin(sender, sender.id == Notification.from_user_id)
            .where(Notification.to_user_id == ctx.user_id, Notification.company_id == ctx.company_id)
            .order_by(Notification.id.desc())
            .limit(NOTIFICATION_PAGE_SIZE)
        )
        return [
            NotificationRead(
                id=row.id,
                subject=row.subject,
                message=row.message,
                is_read=row.is_read,
                created_at=row.created_at,
                from_user_name=sender_name,
            )
            for row, sender_name in session.execute(stmt).all()
        ]

    def mark_read(self, session: Session, ctx: SessionContext, notification_id: int | None) -> MessageResponse:
        if not notification_id:
            raise BadRequest("Notification ID is required")

        result = session.execute(
            update(Notification)
            .where(Notification.id == notification_id, Notification.to_user_id == ctx.user_id)
            .values(is_read=True, read_at=datetime.now(timezone.utc))
        )
        if result.rowcount == 0:
            session.rollback()
            raise NotFound("Notification not found or you do not have permission to update it")
        session.commit()
        return MessageResponse(message="Notification marked as read")


class DirectoryService:
    def list_contacts(self, session: Session, ctx: SessionContext) -> list[ContactRead]:
        if ctx.company_id is None:
            raise AccessDenied("No company associated with this session")
        rows = session.scalars(
            select(ContactEntry)
            .where(ContactEntry.company_id == ctx.company_id)
            .order_by(ContactEntry.name.asc(), ContactEntry.id.asc())
        ).all()
        return [ContactRead.model_validate(row) for row in rows]

    def list_active_employees(self, session: Session) -> list[EmployeeOption]:
        stmt = (
            select(Employee, NamePrefix.name)
            .outerjoin(NamePrefix, NamePrefix.id == Employee.name_prefix_id)
            .where(Employee.is_active.is_(True))
            .order_by(Employee.first_name.asc(), Employee.id.asc())
        )
        return [
            EmployeeOption(
                employee_id=employee.id,
                full_name=format_full_name(prefix, employee.first_name, employee.middle_name, employee.last_name),
            )
            for employee, prefix in session.execute(stmt).all()
        ]


class ThemeService:
    def get_for_user(self, session: Session, ctx: SessionContext) -> ThemeRead:
        theme = session.scalar(
            select(Theme).join(UserTheme, UserTheme.theme_id == Theme.id).where(UserTheme.user_id == ctx.user_id)
        )
        if theme is None:
            theme = session.scalar(
                select(Theme).where(Theme.is_default.is_(True)).order_by(Theme.id.asc()).limit(1)
            )
        if theme is None:
            logger.error("theme.missing_default", extra={"user_id": ctx.user_id})
            raise NotFound("No theme could be loaded. Please contact support.")
        return ThemeRead.model_validate(theme)

    def list_themes(self, session: Session) -> list[ThemeSummary]:
        rows = session.scalars(select(Theme).order_by(Theme.name.asc(), Theme.id.asc())).all()
        return [ThemeSummary.model_validate(row) for row in rows]

    def set_for_user(self, session: Session, ctx: SessionContext, theme_id: int | None) -> MessageResponse:
        if not theme_id:
            raise BadRequest("Theme ID is required")
        if session.get(Theme, theme_id) is None:
            raise NotFound("Theme not found")

        preference = session.get(UserTheme, ctx.user_id)
        if preference is None:
            session.add(UserTheme(user_id=ctx.user_id, theme_id=theme_id))
        else:
            preference.theme_id = theme_id
        session.commit()
        return MessageResponse(message="Theme updated successfully")
