from portal.platform.security.context import RoleType, SessionContext
from portal.platform.security.errors import AccessDenied, InvalidToken, PortalError, Unauthenticated
from portal.platform.security.tokens import TokenSigner

__all__ = [
    "RoleType",
    "SessionContext",
    "PortalError",
    "Unauthenticated",
    "InvalidToken",
    "AccessDenied",
    "TokenSigner",
]
