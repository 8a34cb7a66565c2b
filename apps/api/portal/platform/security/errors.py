from __future__ import annotations

from typing import Any


class PortalError(Exception):
    """Base error for request-terminating failures. Rendered as the JSON error envelope."""

    status_code = 500
    code = "internal_error"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, *, details: Any = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class BadRequest(PortalError):
    status_code = 400
    code = "bad_request"
    default_message = "Malformed or missing input"


class Unauthenticated(PortalError):
    status_code = 401
    code = "unauthenticated"
    default_message = "Unauthorized: No token provided."


class InvalidCredentials(PortalError):
    status_code = 401
    code = "invalid_credentials"
    default_message = "Invalid credentials or account is inactive."


class InvalidToken(PortalError):
    status_code = 403
    code = "invalid_token"
    default_message = "Forbidden: Token is not valid or has expired."


class AccessDenied(PortalError):
    status_code = 403
    code = "access_denied"
    default_message = "Access denied"


class NoDefaultCompany(PortalError):
    status_code = 403
    code = "no_default_company"
    default_message = "Access denied: No default company is assigned to your account or it is inactive."


class NotFound(PortalError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class Conflict(PortalError):
    status_code = 409
    code = "conflict"
    default_message = "Resource already exists"


class InternalError(PortalError):
    pass
