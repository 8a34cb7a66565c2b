import logging

from fastapi import Depends
from starlette.requests import Request

from portal.core.config import get_settings
from portal.metrics import observe_token_verification
from portal.platform.security.context import SessionContext
from portal.platform.security.errors import InvalidToken, Unauthenticated
from portal.platform.security.tokens import TokenSigner

logger = logging.getLogger("portal.auth")


def get_token_signer() -> TokenSigner:
    return TokenSigner.from_settings(get_settings())


def _extract_bearer_token(request: Request) -> str:
    auth_header = request.headers.get("authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()


async def get_session_context(
    request: Request,
    signer: TokenSigner = Depends(get_token_signer),
) -> SessionContext:
    token = _extract_bearer_token(request)
    if not token:
        observe_token_verification("missing")
        raise Unauthenticated()

    try:
        ctx = signer.verify(token)
    except InvalidToken as exc:
        observe_token_verification("rejected")
        logger.warning("auth.token_rejected", extra={"path": request.url.path, "reason": exc.message})
        raise

    observe_token_verification("accepted")
    request.state.session = ctx
    return ctx
