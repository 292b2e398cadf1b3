# middleware/authorization.py
"""
Middleware do portão de autorização das páginas.

Monta a SessionContext a partir do cookie access_token (ou do header
Authorization: Bearer), guarda em request.state.session e aplica
auth.gate.resolve_redirect. Só decodifica o JWT, sem consultar o banco.
"""

from fastapi import Request, Response
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from auth.dependencies import AUTH_COOKIE_NAME
from auth.gate import SessionContext, resolve_redirect
from auth.security import decode_token
from utils.logging_config import get_logger

logger = get_logger(__name__)


def session_from_request(request: Request) -> SessionContext:
    """SessionContext da requisição (anônima quando não há token válido)."""
    token = None

    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[7:]
    else:
        cookie_token = request.cookies.get(AUTH_COOKIE_NAME)
        if cookie_token:
            token = cookie_token[7:] if cookie_token.startswith("Bearer ") else cookie_token

    if not token:
        return SessionContext.anonymous()
    return SessionContext.from_token_payload(decode_token(token))


class AuthorizationGateMiddleware(BaseHTTPMiddleware):
    """
    Uso:
        app.add_middleware(AuthorizationGateMiddleware)
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        session = session_from_request(request)
        request.state.session = session

        destino = resolve_redirect(request.url.path, session)
        if destino and destino != request.url.path:
            logger.debug(
                "Redirecionamento do portão",
                path=request.url.path,
                destino=destino,
                authenticated=session.authenticated,
            )
            return RedirectResponse(url=destino, status_code=307)

        return await call_next(request)
