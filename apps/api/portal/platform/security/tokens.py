from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from portal.core.config import Settings
from portal.platform.security.context import RoleType, SessionContext
from portal.platform.security.errors import InvalidToken

SESSION_TOKEN_TYPE = "session"


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class TokenSigner:
    """Signs session contexts into JWTs and verifies them back.

    One instance per process configuration; tests build their own with a
    throwaway secret.
    """

    def __init__(self, secret: str, *, algorithm: str = "HS256", expiry_hours: int = 8) -> None:
        if not secret:
            raise ValueError("token signing secret must be non-empty")
        self._secret = secret
        self._algorithm = algorithm
        self.expiry = timedelta(hours=expiry_hours)

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenSigner:
        return cls(settings.jwt_secret, algorithm=settings.jwt_algorithm, expiry_hours=settings.token_expiry_hours)

    def issue(self, ctx: SessionContext, *, now: datetime | None = None) -> str:
        issued_at = now or _now_utc()
        payload: dict[str, Any] = {
            "type": SESSION_TOKEN_TYPE,
            "sub": str(ctx.user_id),
            "user_id": ctx.user_id,
            "name": ctx.display_name,
            "role_type": ctx.role_type.value,
            "company_id": ctx.company_id,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.expiry).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> SessionContext:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except ExpiredSignatureError as exc:
            raise InvalidToken("Forbidden: Token has expired.") from exc
        except JWTError as exc:
            raise InvalidToken() from exc

        if payload.get("type", SESSION_TOKEN_TYPE) != SESSION_TOKEN_TYPE:
            raise InvalidToken("Forbidden: Unsupported token type.")

        try:
            user_id = int(payload["user_id"])
            company_raw = payload.get("company_id")
            company_id = int(company_raw) if company_raw is not None else None
            issued_at = _timestamp(payload.get("iat"))
            expires_at = _timestamp(payload.get("exp"))
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidToken("Forbidden: Token claims are malformed.") from exc

        return SessionContext(
            user_id=user_id,
            display_name=str(payload.get("name") or ""),
            role_type=RoleType.parse(payload.get("role_type")),
            company_id=company_id,
            issued_at=issued_at,
            expires_at=expires_at,
        )


def _timestamp(value: Any) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)
