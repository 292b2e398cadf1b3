# auth/gate.py
"""
Regras de acesso às páginas (portão de autorização).

resolve_redirect() é uma função pura de (caminho, sessão) para o destino
do redirecionamento, ou None quando a requisição pode seguir. O middleware
em middleware/authorization.py apenas monta a SessionContext e aplica o
resultado.

Matriz:
    /api/v1/*               -> sempre segue (os handlers fazem suas checagens)
    /dashboard[/...]        -> login, cadastro aprovado e perfil BUDGETIST
    /repair-order[/...]     -> login e cadastro aprovado
    /login, /register       -> sessão aprovada vai para o dashboard
    /registration-pending   -> exige login; sessão já aprovada volta ao login
"""

from dataclasses import dataclass
from typing import Optional

from auth.models import UserStatus, UserType

LOGIN_PATH = "/login"
REGISTER_PATH = "/register"
PENDING_PATH = "/registration-pending"
DASHBOARD_PREFIX = "/dashboard"
DASHBOARD_HOME = "/dashboard/repair-orders"
REPAIR_ORDER_PREFIX = "/repair-order"
API_PREFIX = "/api/v1"


@dataclass(frozen=True)
class SessionContext:
    """Estado da sessão relevante para o portão, por requisição."""

    authenticated: bool = False
    status: Optional[UserStatus] = None
    type: Optional[UserType] = None
    user_id: Optional[str] = None

    @property
    def approved(self) -> bool:
        return self.authenticated and self.status == UserStatus.APPROVED

    @classmethod
    def anonymous(cls) -> "SessionContext":
        return cls()

    @classmethod
    def from_token_payload(cls, payload: Optional[dict]) -> "SessionContext":
        """Monta o contexto a partir das claims do JWT (None = anônimo)."""
        if not payload or not payload.get("sub"):
            return cls.anonymous()
        return cls(
            authenticated=True,
            status=_enum_or_none(UserStatus, payload.get("status")),
            type=_enum_or_none(UserType, payload.get("type")),
            user_id=payload.get("sub"),
        )


def _enum_or_none(enum_cls, value):
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _matches(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def resolve_redirect(path: str, session: SessionContext) -> Optional[str]:
    """
    Decide o redirecionamento para uma requisição de página.

    Args:
        path: caminho requisitado (sem query string)
        session: contexto da sessão atual

    Returns:
        Caminho de destino, ou None para seguir normalmente
    """
    if _matches(path, API_PREFIX):
        return None

    if _matches(path, DASHBOARD_PREFIX):
        if not session.authenticated:
            return LOGIN_PATH
        if session.status != UserStatus.APPROVED:
            return PENDING_PATH
        if session.type != UserType.BUDGETIST:
            return REPAIR_ORDER_PREFIX
        return None

    if _matches(path, REPAIR_ORDER_PREFIX):
        if not session.authenticated:
            return LOGIN_PATH
        if session.status != UserStatus.APPROVED:
            return PENDING_PATH
        return None

    if path in (LOGIN_PATH, REGISTER_PATH):
        if session.approved:
            return DASHBOARD_HOME
        return None

    if path == PENDING_PATH:
        if not session.authenticated:
            return LOGIN_PATH
        if session.status == UserStatus.APPROVED:
            return LOGIN_PATH
        return None

    return None
