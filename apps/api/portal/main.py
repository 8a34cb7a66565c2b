from contextlib import asynccontextmanager
import logging
from typing import Any
import uuid

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from sqlalchemy.exc import SQLAlchemyError

from portal.api.routes import router as portal_router
from portal.context import get_correlation_id
from portal.core.config import get_settings
from portal.logging import configure_logging
from portal.middleware.correlation_id import CorrelationIdMiddleware
from portal.middleware.rate_limit import LoginRateLimitMiddleware
from portal.middleware.request_logging import RequestLoggingMiddleware
from portal.otel import get_fastapi_server_request_hook, setup_otel
from portal.platform.security.errors import InternalError, PortalError


configure_logging()
logger = logging.getLogger("portal.lifecycle")


def _error_response(request: Request, status_code: int, code: str, message: str, details: Any = None) -> JSONResponse:
    correlation_id = (
        get_correlation_id()
        or getattr(request.state, "correlation_id", None)
        or str(uuid.uuid4())
    )
    return JSONResponse(
        status_code=status_code,
        content={
            "code": code,
            "message": message,
            "details": jsonable_encoder(details),
            "correlation_id": correlation_id,
        },
        headers={"X-Correlation-Id": correlation_id},
    )


def _session_log_fields(request: Request) -> dict[str, Any]:
    ctx = getattr(request.state, "session", None)
    if ctx is None:
        return {}
    return {"user_id": ctx.user_id, "company_id": ctx.company_id, "role_type": ctx.role_type.name}


async def handle_portal_error(request: Request, exc: PortalError) -> JSONResponse:
    return _error_response(request, exc.status_code, exc.code, exc.message, exc.details)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(request, 400, "bad_request", "Malformed or missing input", exc.errors())


async def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        "db.error",
        exc_info=exc,
        extra={"path": request.url.path, "error": str(exc), **_session_log_fields(request)},
    )
    error = InternalError()
    return _error_response(request, error.status_code, error.code, error.message)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Fails fast when JWT_SECRET or another required setting is missing.
    settings = get_settings()
    if settings.otel_enabled:
        setup_otel("portal-api", True)
    logger.info("system.started", extra={"reason": settings.app_env})
    yield


app = FastAPI(title="Portal API", version="0.1.0", lifespan=lifespan)
app.add_middleware(LoginRateLimitMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(CorrelationIdMiddleware)
app.add_exception_handler(PortalError, handle_portal_error)
app.add_exception_handler(RequestValidationError, handle_validation_error)
app.add_exception_handler(SQLAlchemyError, handle_database_error)
app.include_router(portal_router)

if not getattr(app, "_is_instrumented_by_opentelemetry", False):
    FastAPIInstrumentor().instrument_app(app, server_request_hook=get_fastapi_server_request_hook())
