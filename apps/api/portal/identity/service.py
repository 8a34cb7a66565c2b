from __future__ import annotations

import logging
import re

from opentelemetry import trace
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from portal import audit
from portal.core.config import Settings
from portal.identity.models import Company, User, UserCategory, UserStatus
from portal.identity.repository import IdentityRepository
from portal.identity.schemas import (
    ChangePasswordRequest,
    CompanyRead,
    StatusResponse,
    TokenResponse,
    UserCreate,
    UserCreated,
)
from portal.metrics import observe_company_switch, observe_login_attempt
from portal.otel import set_session_attributes
from portal.platform.security.context import RoleType, SessionContext
from portal.platform.security.errors import (
    AccessDenied,
    BadRequest,
    Conflict,
    InvalidCredentials,
    NoDefaultCompany,
    NotFound,
)
from portal.platform.security.passwords import hash_password, password_too_long, verify_password
from portal.platform.security.tokens import TokenSigner

logger = logging.getLogger("portal.identity")
tracer = trace.get_tracer("portal.identity")

identity_repository = IdentityRepository()

MOBILE_RE = re.compile(r"^[6-9]\d{9}$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _token_response(signer: TokenSigner, ctx: SessionContext) -> TokenResponse:
    return TokenResponse(token=signer.issue(ctx), expires_in=int(signer.expiry.total_seconds()))


class CredentialIssuer:
    """Exchanges a login handle and secret for a signed session token."""

    def login(self, session: Session, signer: TokenSigner, settings: Settings, login_id: str, password: str) -> TokenResponse:
        with tracer.start_as_current_span("identity.login") as span:
            user = identity_repository.get_active_user_by_login(session, login_id)
            matched = verify_password(password, user.password_hash if user is not None else None)
            if user is None or not matched:
                observe_login_attempt("invalid_credentials")
                logger.info("auth.login_failed", extra={"login_id": login_id, "reason": "invalid_credentials"})
                raise InvalidCredentials()

            role_type = RoleType.parse(user.role_type)
            company_id = self._resolve_initial_company(session, settings, user, role_type)
            if company_id is None:
                observe_login_attempt("no_default_company")
                logger.info(
                    "auth.login_failed",
                    extra={"login_id": login_id, "user_id": user.id, "reason": "no_default_company"},
                )
                raise NoDefaultCompany()

            ctx = SessionContext(
                user_id=user.id,
                display_name=user.name,
                role_type=role_type,
                company_id=company_id,
            )
            set_session_attributes(span, ctx)
            response = _token_response(signer, ctx)

        observe_login_attempt("success")
        audit.record(
            "auth.login",
            actor_user_id=user.id,
            login_id=login_id,
            role_type=role_type.value,
            company_id=company_id,
        )
        return response

    def _resolve_initial_company(
        self, session: Session, settings: Settings, user: User, role_type: RoleType
    ) -> int | None:
        if role_type is RoleType.SUPERUSER:
            if settings.superuser_company_id is not None:
                return settings.superuser_company_id
            company = identity_repository.get_lowest_company(session)
            return company.id if company is not None else None

        membership = identity_repository.get_default_membership(session, user.id)
        return membership.company_id if membership is not None else None


class CompanyResolver:
    def get_active_company(self, session: Session, ctx: SessionContext) -> CompanyRead:
        if ctx.company_id is None:
            raise AccessDenied("No company associated with this session")
        company = identity_repository.get_company(session, ctx.company_id)
        if company is None:
            raise NotFound("Company not found")
        return CompanyRead.model_validate(company)

    def list_companies(self, session: Session, ctx: SessionContext) -> list[CompanyRead]:
        rows: list[Company]
        if ctx.is_superuser:
            rows = identity_repository.list_companies(session)
        else:
            rows = identity_repository.list_member_companies(session, ctx.user_id)
        return [CompanyRead.model_validate(row) for row in rows]

    def switch_company(
        self,
        session: Session,
        signer: TokenSigner,
        settings: Settings,
        ctx: SessionContext,
        new_company_id: int | None,
    ) -> TokenResponse:
        if new_company_id is None:
            observe_company_switch("bad_request")
            raise BadRequest("New company ID is required")

        if settings.enforce_switch_membership:
            if identity_repository.get_company(session, new_company_id) is None:
                observe_company_switch("not_found")
                raise NotFound("Company not found")
            if not ctx.is_superuser and not identity_repository.has_active_membership(
                session, ctx.user_id, new_company_id
            ):
                observe_company_switch("denied")
                logger.warning(
                    "auth.switch_company_denied",
                    extra={"user_id": ctx.user_id, "company_id": ctx.company_id, "target_company_id": new_company_id},
                )
                raise AccessDenied("No active membership for the requested company")

        switched = ctx.with_company(new_company_id)
        response = _token_response(signer, switched)
        observe_company_switch("success")
        audit.record(
            "auth.switch_company",
            actor_user_id=ctx.user_id,
            role_type=ctx.role_type.value,
            company_id=new_company_id,
            details={"previous_company_id": ctx.company_id},
        )
        return response


class PasswordService:
    def change_password(
        self, session: Session, settings: Settings, ctx: SessionContext, dto: ChangePasswordRequest
    ) -> StatusResponse:
        if not dto.old_password or not dto.new_password:
            raise BadRequest("Old and new passwords are required")
        if password_too_long(dto.new_password):
            raise BadRequest("New password is too long")

        user = identity_repository.get_user(session, ctx.user_id)
        if user is None:
            raise NotFound("User not found")
        if not verify_password(dto.old_password, user.password_hash):
            raise InvalidCredentials("Old password is incorrect")

        user.password_hash = hash_password(dto.new_password, rounds=settings.bcrypt_rounds)
        session.commit()

        audit.record(
            "auth.change_password",
            actor_user_id=ctx.user_id,
            role_type=ctx.role_type.value,
            company_id=ctx.company_id,
        )
        return StatusResponse(message="Password updated successfully")


class UserAdminService:
    def create_user(self, session: Session, settings: Settings, ctx: SessionContext, dto: UserCreate) -> UserCreated:
        if not (ctx.is_superuser or ctx.is_admin):
            raise AccessDenied("Only administrators can create users")

        role_type = RoleType.from_label(dto.user_type)
        if role_type is RoleType.UNKNOWN:
            raise BadRequest("Unknown user type", details={"user_type": dto.user_type})
        if role_type is RoleType.SUPERUSER and not ctx.is_superuser:
            raise AccessDenied("Only a superuser can create superusers")

        category = UserCategory.INTERNAL if dto.user_category == "Internal" else UserCategory.EXTERNAL
        employee_id = dto.employee_id if category is UserCategory.INTERNAL else None
        if category is UserCategory.INTERNAL and not employee_id:
            raise BadRequest("Employee is required for internal users")

        mobile_no = (dto.mobile_no or "").strip() or None
        email = (dto.email_id or "").strip() or None
        if mobile_no is not None and not MOBILE_RE.match(mobile_no):
            raise BadRequest("Invalid mobile number")
        if email is not None and not EMAIL_RE.match(email):
            raise BadRequest("Invalid email address")
        if password_too_long(dto.password):
            raise BadRequest("Password is too long")

        login = dto.login_name
        if employee_id is not None and identity_repository.employee_linked(session, employee_id):
            raise Conflict("Employee is already linked to a user")
        if identity_repository.login_taken(session, login):
            raise Conflict("Login name already exists")
        if mobile_no is not None and identity_repository.mobile_taken(session, mobile_no):
            raise Conflict("Mobile number already exists")
        if email is not None and identity_repository.email_taken(session, email):
            raise Conflict("Email already exists")

        user = User(
            name=dto.username,
            login=login,
            password_hash=hash_password(dto.password, rounds=settings.bcrypt_rounds),
            role_type=role_type.value,
            category=category.value,
            mobile_no=mobile_no,
            email=email,
            employee_id=employee_id,
            status=UserStatus.ACTIVE.value,
            created_by=ctx.user_id,
        )
        session.add(user)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            raise Conflict("Duplicate entry")
        session.refresh(user)

        audit.record(
            "identity.user_created",
            actor_user_id=ctx.user_id,
            login_id=login,
            role_type=role_type.value,
            company_id=ctx.company_id,
            details={"user_id": user.id},
        )
        return UserCreated.model_validate(user)
