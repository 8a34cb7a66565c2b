from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from portal.core.auth import get_session_context, get_token_signer
from portal.core.config import Settings, get_settings
from portal.core.database import get_db
from portal.identity.schemas import (
    ChangePasswordRequest,
    CompanyRead,
    LoginRequest,
    StatusResponse,
    SwitchCompanyRequest,
    TokenResponse,
    UserCreate,
    UserCreated,
)
from portal.identity.service import CompanyResolver, CredentialIssuer, PasswordService, UserAdminService
from portal.platform.security.context import SessionContext
from portal.platform.security.tokens import TokenSigner


router = APIRouter(tags=["identity"])

credential_issuer = CredentialIssuer()
company_resolver = CompanyResolver()
password_service = PasswordService()
user_admin_service = UserAdminService()


@router.post("/login", response_model=TokenResponse)
def login(
    dto: LoginRequest,
    db: Session = Depends(get_db),
    signer: TokenSigner = Depends(get_token_signer),
    settings: Settings = Depends(get_settings),
) -> TokenResponse:
    return credential_issuer.login(db, signer, settings, dto.login_id, dto.password)


@router.get("/company", response_model=CompanyRead)
def get_company(
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
) -> CompanyRead:
    return company_resolver.get_active_company(db, ctx)


@router.get("/companies-for-user", response_model=list[CompanyRead])
def list_companies_for_user(
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
) -> list[CompanyRead]:
    return company_resolver.list_companies(db, ctx)


@router.post("/user/switch-company", response_model=TokenResponse)
def switch_company(
    dto: SwitchCompanyRequest,
    db: Session = Depends(get_db),
    signer: TokenSigner = Depends(get_token_signer),
    settings: Settings = Depends(get_settings),
    ctx: SessionContext = Depends(get_session_context),
) -> TokenResponse:
    return company_resolver.switch_company(db, signer, settings, ctx, dto.new_company_id)


@router.put("/users/change-password", response_model=StatusResponse)
def change_password(
    dto: ChangePasswordRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    ctx: SessionContext = Depends(get_session_context),
) -> StatusResponse:
    return password_service.change_password(db, settings, ctx, dto)


@router.post("/users", response_model=UserCreated, status_code=status.HTTP_201_CREATED)
def create_user(
    dto: UserCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    ctx: SessionContext = Depends(get_session_context),
) -> UserCreated:
    return user_admin_service.create_user(db, settings, ctx, dto)
