# utils/rate_limit.py
# -*- coding: utf-8 -*-
"""
Rate Limiting do Portal Frota

SECURITY: Protege o login contra brute-force.

Uso:
    from utils.rate_limit import limiter, rate_limit_exceeded_handler

    # No main.py
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # Nos routers
    @router.post("/login")
    @limiter.limit(LIMITS["login"])
    async def login(request: Request, ...):
        ...
"""

import os

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from utils.logging_config import get_logger

logger = get_logger(__name__)

# ==================================================
# CONFIGURAÇÃO
# ==================================================


def get_real_ip(request: Request) -> str:
    """
    Obtém IP real do cliente, considerando headers de proxy.

    Prioridade: X-Forwarded-For, X-Real-IP, IP da conexão.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return get_remote_address(request)


RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
RATE_LIMIT_DEFAULT = os.getenv("RATE_LIMIT_DEFAULT", "200/minute")
RATE_LIMIT_LOGIN = os.getenv("RATE_LIMIT_LOGIN", "5/minute")
RATE_LIMIT_REGISTER = os.getenv("RATE_LIMIT_REGISTER", "10/minute")
RATE_LIMIT_STORAGE = os.getenv("RATE_LIMIT_STORAGE", "memory://")

LIMITS = {
    "login": RATE_LIMIT_LOGIN,
    "register": RATE_LIMIT_REGISTER,
}

limiter = Limiter(
    key_func=get_real_ip,
    default_limits=[RATE_LIMIT_DEFAULT],
    enabled=RATE_LIMIT_ENABLED,
    storage_uri=RATE_LIMIT_STORAGE,
)


# ==================================================
# HANDLER
# ==================================================

async def rate_limit_exceeded_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Resposta JSON em português para limite excedido.
    """
    logger.warning(
        "Rate limit excedido",
        ip=get_real_ip(request),
        path=request.url.path,
        detail=str(getattr(exc, "detail", exc)),
    )

    return JSONResponse(
        status_code=429,
        content={
            "error": True,
            "message": "Limite de requisições excedido. Tente novamente em alguns minutos.",
        },
        headers={"Retry-After": "60"},
    )
