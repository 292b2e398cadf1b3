"""
SECURITY: Audit logging de eventos sensíveis.

Eventos registrados:
- AUTH_LOGIN_SUCCESS/FAILURE, AUTH_LOGOUT
- USER_REGISTERED, USER_CREATED, USER_UPDATED, USER_STATUS_CHANGED, USER_DELETED
- BASE_DELETED, REPAIR_ORDER_DELETED, REPAIR_ORDER_STATUS_CHANGED
"""

from enum import Enum
from typing import Any, Dict, Optional

from fastapi import Request

from middleware.request_id import get_request_id
from utils.logging_config import get_logger

audit_logger = get_logger("security.audit")


class AuditEvent(str, Enum):
    """Tipos de eventos de auditoria"""
    AUTH_LOGIN_SUCCESS = "AUTH_LOGIN_SUCCESS"
    AUTH_LOGIN_FAILURE = "AUTH_LOGIN_FAILURE"
    AUTH_LOGOUT = "AUTH_LOGOUT"

    USER_REGISTERED = "USER_REGISTERED"
    USER_CREATED = "USER_CREATED"
    USER_UPDATED = "USER_UPDATED"
    USER_STATUS_CHANGED = "USER_STATUS_CHANGED"
    USER_DELETED = "USER_DELETED"

    BASE_DELETED = "BASE_DELETED"
    REPAIR_ORDER_DELETED = "REPAIR_ORDER_DELETED"
    REPAIR_ORDER_STATUS_CHANGED = "REPAIR_ORDER_STATUS_CHANGED"


SENSITIVE_KEYS = {"password", "senha", "secret", "token", "hashed_password", "authorization"}


def get_client_ip(request: Optional[Request]) -> str:
    """
    SECURITY: Extrai IP real do cliente considerando proxies.
    """
    if not request:
        return "unknown"

    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    if request.client:
        return request.client.host

    return "unknown"


def mask_sensitive_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """Mascara dados sensíveis antes de logar."""
    masked = {}
    for key, value in data.items():
        if any(s in key.lower() for s in SENSITIVE_KEYS):
            masked[key] = "***MASKED***"
        elif isinstance(value, dict):
            masked[key] = mask_sensitive_data(value)
        else:
            masked[key] = value
    return masked


def log_audit_event(
    event: AuditEvent,
    user_id: Optional[str] = None,
    request: Optional[Request] = None,
    details: Optional[Dict[str, Any]] = None,
    success: bool = True,
):
    """
    Registra evento de auditoria.

    Example:
        log_audit_event(
            AuditEvent.USER_STATUS_CHANGED,
            user_id=admin.id,
            request=request,
            details={"target_user_id": alvo.id, "status": "APPROVED"},
        )
    """
    log = audit_logger.info if success else audit_logger.warning
    log(
        event.value,
        audit=True,
        success=success,
        user_id=user_id,
        ip=get_client_ip(request),
        path=request.url.path if request else None,
        request_id=get_request_id(),
        details=mask_sensitive_data(details or {}),
    )


def log_login_success(user_id: str, request: Request):
    log_audit_event(AuditEvent.AUTH_LOGIN_SUCCESS, user_id=user_id, request=request)


def log_login_failure(email: str, request: Request, reason: str):
    log_audit_event(
        AuditEvent.AUTH_LOGIN_FAILURE,
        request=request,
        details={"email": email, "reason": reason},
        success=False,
    )


def log_logout(user_id: Optional[str], request: Request):
    log_audit_event(AuditEvent.AUTH_LOGOUT, user_id=user_id, request=request)
