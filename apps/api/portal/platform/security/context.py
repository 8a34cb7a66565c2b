from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import StrEnum


class RoleType(StrEnum):
    """Authorization rule-set of a session. Stored as a one-letter code on users and rights."""

    SUPERUSER = "S"
    ADMIN = "A"
    USER = "U"
    UNKNOWN = "?"

    @classmethod
    def parse(cls, raw: object) -> RoleType:
        if isinstance(raw, RoleType):
            return raw
        if not isinstance(raw, str):
            return cls.UNKNOWN
        code = raw.strip().upper()
        for member in (cls.SUPERUSER, cls.ADMIN, cls.USER):
            if code == member.value:
                return member
        return cls.UNKNOWN

    @classmethod
    def from_label(cls, label: str) -> RoleType:
        """Map a form label such as ``"Admin"`` or ``"user"`` to its role type."""
        cleaned = label.strip()
        if not cleaned:
            return cls.UNKNOWN
        return cls.parse(cleaned[0])


@dataclass(frozen=True, slots=True)
class SessionContext:
    """Verified identity, role and active company for one request.

    Rebuilt from the bearer token on every call; never stored server-side.
    Equality ignores the signing timestamps.
    """

    user_id: int
    display_name: str
    role_type: RoleType
    company_id: int | None
    issued_at: datetime | None = field(default=None, compare=False)
    expires_at: datetime | None = field(default=None, compare=False)

    @property
    def is_superuser(self) -> bool:
        return self.role_type is RoleType.SUPERUSER

    @property
    def is_admin(self) -> bool:
        return self.role_type is RoleType.ADMIN

    def with_company(self, company_id: int) -> SessionContext:
        return replace(self, company_id=company_id, issued_at=None, expires_at=None)
