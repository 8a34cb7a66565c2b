from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _strip_required(value: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValueError("must not be blank")
    return cleaned


class LoginRequest(BaseModel):
    login_id: str = Field(min_length=1)
    password: str = Field(min_length=1)

    @field_validator("login_id")
    @classmethod
    def _validate_login_id(cls, value: str) -> str:
        return _strip_required(value)


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in: int


class CompanyRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    company_id: int = Field(validation_alias="id")
    company_name: str = Field(validation_alias="name")


class SwitchCompanyRequest(BaseModel):
    new_company_id: int | None = None


class ChangePasswordRequest(BaseModel):
    old_password: str | None = None
    new_password: str | None = None


class StatusResponse(BaseModel):
    status: str = "ok"
    message: str | None = None


class UserCreate(BaseModel):
    user_category: Literal["Internal", "External"]
    employee_id: int | None = None
    username: str = Field(min_length=1, max_length=150)
    login_name: str = Field(min_length=1, max_length=100)
    mobile_no: str | None = None
    email_id: str | None = None
    password: str = Field(min_length=1)
    user_type: str = Field(min_length=1)

    @field_validator("username", "login_name")
    @classmethod
    def _validate_names(cls, value: str) -> str:
        return _strip_required(value)


class UserCreated(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    login: str
    role_type: str
    category: str
