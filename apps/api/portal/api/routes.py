from fastapi import APIRouter, Depends
from fastapi.responses import Response

from portal.core.auth import get_session_context
from portal.core.config import get_settings
from portal.identity.api import router as identity_router
from portal.metrics import generate_metrics_payload, metrics_content_type
from portal.navigation.api import router as navigation_router
from portal.platform.security.context import SessionContext
from portal.platform.security.errors import AccessDenied, NotFound
from portal.workspace.api import router as workspace_router

api_router = APIRouter(prefix="/api")
api_router.include_router(identity_router)
api_router.include_router(navigation_router)
api_router.include_router(workspace_router)

router = APIRouter()
router.include_router(api_router)


@router.get("/health", tags=["system"])
def health() -> dict[str, str]:
    settings = get_settings()
    return {
        "status": "ok",
        "service": settings.app_name,
        "environment": settings.app_env,
    }


@router.get("/metrics", tags=["system"])
def metrics(ctx: SessionContext = Depends(get_session_context)) -> Response:
    settings = get_settings()
    if not settings.metrics_enabled:
        raise NotFound()
    if not ctx.is_superuser:
        raise AccessDenied("Metrics are restricted to superusers")
    return Response(content=generate_metrics_payload(), media_type=metrics_content_type())
