from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from portal.core.auth import get_session_context
from portal.core.database import get_db
from portal.platform.security.context import SessionContext
from portal.workspace.schemas import (
    ContactRead,
    EmployeeOption,
    MarkNotificationReadRequest,
    MessageResponse,
    NotificationRead,
    SubscriptionStatus,
    ThemeRead,
    ThemeSummary,
    UserThemeUpdate,
)
from portal.workspace.service import DirectoryService, NotificationService, SubscriptionService, ThemeService


router = APIRouter(tags=["workspace"])

subscription_service = SubscriptionService()
notification_service = NotificationService()
directory_service = DirectoryService()
theme_service = ThemeService()


@router.post("/check-subscription", response_model=SubscriptionStatus)
def check_subscription(db: Session = Depends(get_db)) -> SubscriptionStatus:
    return subscription_service.check(db)


@router.get("/notifications", response_model=list[NotificationRead])
def list_notifications(
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
) -> list[NotificationRead]:
    return notification_service.list_inbox(db, ctx)


@router.put("/notifications/read", response_model=MessageResponse)
def mark_notification_read(
    dto: MarkNotificationReadRequest,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
) -> MessageResponse:
    return notification_service.mark_read(db, ctx, dto.notification_id)


@router.get("/contact-directory", response_model=list[ContactRead])
def list_contact_directory(
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
) -> list[ContactRead]:
    return directory_service.list_contacts(db, ctx)


@router.get("/active-employees", response_model=list[EmployeeOption])
def list_active_employees(
    db: Session = Depends(get_db),
    _ctx: SessionContext = Depends(get_session_context),
) -> list[EmployeeOption]:
    return directory_service.list_active_employees(db)


@router.get("/theme", response_model=ThemeRead)
def get_user_theme(
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
) -> ThemeRead:
    return theme_service.get_for_user(db, ctx)


@router.get("/themes", response_model=list[ThemeSummary])
def list_themes(
    db: Session = Depends(get_db),
    _ctx: SessionContext = Depends(get_session_context),
) -> list[ThemeSummary]:
    return theme_service.list_themes(db)


@router.post("/user/theme", response_model=MessageResponse)
def set_user_theme(
    dto: UserThemeUpdate,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
) -> MessageResponse:
    return theme_service.set_for_user(db, ctx, dto.theme_id)
