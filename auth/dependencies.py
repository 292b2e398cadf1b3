# auth/dependencies.py
"""
Dependencies de autenticação para injeção nas rotas da API.

O token é aceito via header Authorization (Bearer) ou via cookie HttpOnly
definido no login. O usuário é sempre recarregado do banco, então o
status/perfil considerado aqui é o atual (e não o gravado no token).
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from database.connection import get_db
from auth.models import User
from auth.security import decode_token

AUTH_COOKIE_NAME = "access_token"

oauth2_scheme_optional = OAuth2PasswordBearer(tokenUrl="/api/v1/login", auto_error=False)


def extrair_token(request: Request, token_header: Optional[str] = None) -> Optional[str]:
    """Token do header Authorization ou, na falta dele, do cookie."""
    if token_header:
        return token_header

    cookie_token = request.cookies.get(AUTH_COOKIE_NAME)
    if cookie_token:
        return cookie_token[7:] if cookie_token.startswith("Bearer ") else cookie_token
    return None


def _usuario_do_token(token: Optional[str], db: Session) -> Optional[User]:
    if not token:
        return None

    payload = decode_token(token)
    if payload is None:
        return None

    user_id = payload.get("sub")
    if user_id is None:
        return None

    return db.query(User).filter(User.id == user_id).first()


async def get_current_user(
    request: Request,
    token_header: Optional[str] = Depends(oauth2_scheme_optional),
    db: Session = Depends(get_db)
) -> User:
    """
    Dependency que retorna o usuário autenticado.
    Lança HTTPException 401 se não houver sessão válida.

    Uso:
        @router.post("/rota-protegida")
        def rota(user: User = Depends(get_current_user)):
            ...
    """
    user = _usuario_do_token(extrair_token(request, token_header), db)

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Não autorizado",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


async def get_optional_user(
    request: Request,
    token_header: Optional[str] = Depends(oauth2_scheme_optional),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """
    Retorna o usuário se autenticado, ou None se não.
    """
    return _usuario_do_token(extrair_token(request, token_header), db)


async def require_approved_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Exige cadastro aprovado.
    Lança HTTPException 403 se o cadastro estiver pendente ou reprovado.
    """
    if not current_user.is_approved:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cadastro ainda não aprovado"
        )
    return current_user


async def require_budgetist(
    current_user: User = Depends(require_approved_user)
) -> User:
    """
    Exige orçamentista aprovado (acesso do dashboard).

    Uso:
        @router.get("/rota-dashboard")
        def rota(user: User = Depends(require_budgetist)):
            ...
    """
    if not current_user.is_budgetist:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Acesso restrito a orçamentistas"
        )
    return current_user
