from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from portal.identity.models import Company, User, UserCompany, UserStatus


class IdentityRepository:
    """Read/write access to users, companies and memberships."""

    def get_active_user_by_login(self, session: Session, login: str) -> User | None:
        return session.scalar(
            select(User).where(User.login == login, User.status != UserStatus.DISABLED.value).limit(1)
        )

    def get_user(self, session: Session, user_id: int) -> User | None:
        return session.get(User, user_id)

    def get_company(self, session: Session, company_id: int) -> Company | None:
        return session.get(Company, company_id)

    def get_lowest_company(self, session: Session) -> Company | None:
        return session.scalar(select(Company).order_by(Company.id.asc()).limit(1))

    def get_default_membership(self, session: Session, user_id: int) -> UserCompany | None:
        return session.scalar(
            select(UserCompany)
            .where(
                UserCompany.user_id == user_id,
                UserCompany.is_default.is_(True),
                UserCompany.is_active.is_(True),
            )
            .order_by(UserCompany.id.asc())
            .limit(1)
        )

    def has_active_membership(self, session: Session, user_id: int, company_id: int) -> bool:
        count = session.scalar(
            select(func.count())
            .select_from(UserCompany)
            .where(
                UserCompany.user_id == user_id,
                UserCompany.company_id == company_id,
                UserCompany.is_active.is_(True),
            )
        )
        return bool(count)

    def list_companies(self, session: Session) -> list[Company]:
        return list(session.scalars(select(Company).order_by(Company.name.asc(), Company.id.asc())).all())

    def list_member_companies(self, session: Session, user_id: int) -> list[Company]:
        stmt = (
            select(Company)
            .join(UserCompany, UserCompany.company_id == Company.id)
            .where(UserCompany.user_id == user_id, UserCompany.is_active.is_(True))
            .order_by(Company.name.asc(), Company.id.asc())
        )
        return list(session.scalars(stmt).all())

    def login_taken(self, session: Session, login: str) -> bool:
        return session.scalar(select(User.id).where(User.login == login).limit(1)) is not None

    def mobile_taken(self, session: Session, mobile_no: str) -> bool:
        return session.scalar(select(User.id).where(User.mobile_no == mobile_no).limit(1)) is not None

    def email_taken(self, session: Session, email: str) -> bool:
        return session.scalar(select(User.id).where(User.email == email).limit(1)) is not None

    def employee_linked(self, session: Session, employee_id: int) -> bool:
        stmt = select(User.id).where(User.employee_id == employee_id, User.employee_id != 0).limit(1)
        return session.scalar(stmt) is not None
