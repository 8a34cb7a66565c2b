from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class SubscriptionStatus(BaseModel):
    is_expired: bool
    end_at: datetime | None = None


class NotificationRead(BaseModel):
    id: int
    subject: str
    message: str
    is_read: bool
    created_at: datetime
    from_user_name: str | None = None


class MarkNotificationReadRequest(BaseModel):
    notification_id: int | None = None


class ContactRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    mobile: str | None = None
    email: str | None = None
    address: str | None = None
    remark: str | None = None


class EmployeeOption(BaseModel):
    employee_id: int
    full_name: str


class ThemeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    navbar_bg: str
    sidebar_bg: str
    module_bg: str
    footer_bg: str
    menu_submenu_bg: str
    current_module_color: str
    menu_type_color: str
    navbar_font_color: str
    menu_header_bg: str


class ThemeSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    navbar_bg: str


class UserThemeUpdate(BaseModel):
    theme_id: int | None = None


class MessageResponse(BaseModel):
    message: str
