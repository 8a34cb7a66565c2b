from portal.platform.security.context import RoleType, SessionContext
from portal.platform.security.errors import (
    AccessDenied,
    BadRequest,
    Conflict,
    InternalError,
    InvalidCredentials,
    InvalidToken,
    NoDefaultCompany,
    NotFound,
    PortalError,
    Unauthenticated,
)
from portal.platform.security.passwords import hash_password, verify_password
from portal.platform.security.tokens import TokenSigner

__all__ = [
    "RoleType",
    "SessionContext",
    "PortalError",
    "BadRequest",
    "Unauthenticated",
    "InvalidCredentials",
    "InvalidToken",
    "AccessDenied",
    "NoDefaultCompany",
    "NotFound",
    "Conflict",
    "InternalError",
    "TokenSigner",
    "hash_password",
    "verify_password",
]
