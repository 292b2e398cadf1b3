# auth/router.py
"""
Endpoints de autenticação: login, logout, sessão atual e cadastro público

SECURITY: Implementa autenticação via HttpOnly cookies para prevenir XSS.
"""

from datetime import timedelta
from fastapi import APIRouter, Depends, HTTPException, status, Request, Response
from sqlalchemy.orm import Session

from database.connection import get_db
from auth.models import User, UserStatus
from auth.schemas import LoginRequest, SessionUser, Token, UserRegister, UserResponse
from auth.security import verify_password, get_password_hash, create_session_token
from auth.dependencies import AUTH_COOKIE_NAME, get_current_user, get_optional_user
from config import ACCESS_TOKEN_EXPIRE_MINUTES, IS_PRODUCTION
from utils.logging_config import get_logger

# SECURITY: Rate Limiting
from utils.rate_limit import limiter, LIMITS

# SECURITY: Audit Logging
from utils.audit import (
    AuditEvent, log_audit_event, log_login_success, log_login_failure, log_logout
)

logger = get_logger(__name__)

router = APIRouter(tags=["Autenticação"])


def verificar_unicidade_usuario(
    db: Session,
    cpf: str = None,
    email: str = None,
    ignorar_id: str = None,
):
    """
    Pré-consulta de unicidade de cpf e email. Lança 409 no primeiro conflito.
    """
    for campo, valor, mensagem in (
        (User.cpf, cpf, "CPF já cadastrado"),
        (User.email, email, "Email já cadastrado"),
    ):
        if valor is None:
            continue
        query = db.query(User).filter(campo == valor)
        if ignorar_id:
            query = query.filter(User.id != ignorar_id)
        if query.first():
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=mensagem)


@router.post("/login", response_model=Token)
@limiter.limit(LIMITS["login"])  # SECURITY: 5 tentativas/minuto por IP
async def login(
    request: Request,  # Necessário para rate limiting
    response: Response,
    credenciais: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    Autentica o usuário e retorna um token JWT.

    - **email**: Email cadastrado
    - **password**: Senha

    O token é retornado no body e também definido como cookie HttpOnly.
    Usuários com cadastro pendente conseguem entrar; o gate de páginas os
    envia para /registration-pending.
    """
    user = db.query(User).filter(User.email == credenciais.email.strip()).first()

    if not user or not verify_password(credenciais.password, user.hashed_password):
        log_login_failure(
            credenciais.email, request,
            "user_not_found" if not user else "invalid_password"
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Email ou senha inválidos",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_session_token(
        user, expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )

    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=f"Bearer {access_token}",
        httponly=True,
        secure=IS_PRODUCTION,
        samesite="lax",
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        path="/"
    )

    log_login_success(user.id, request)

    return Token(access_token=access_token, token_type="bearer")


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    current_user: User = Depends(get_optional_user)
):
    """
    Logout do usuário. Remove o cookie HttpOnly de autenticação.
    """
    log_logout(current_user.id if current_user else None, request)

    response.delete_cookie(
        key=AUTH_COOKIE_NAME,
        httponly=True,
        secure=IS_PRODUCTION,
        samesite="lax",
        path="/"
    )

    return {"message": "Logout realizado com sucesso"}


@router.get("/me", response_model=SessionUser)
async def get_me(current_user: User = Depends(get_current_user)):
    """
    Retorna os dados da sessão atual.
    """
    return current_user


@router.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.limit(LIMITS["register"])  # SECURITY: 10 cadastros/minuto por IP
async def register(
    request: Request,
    dados: UserRegister,
    db: Session = Depends(get_db)
):
    """
    Cadastro público. O usuário nasce PENDING e só acessa o sistema
    depois de aprovado por um orçamentista.
    """
    verificar_unicidade_usuario(db, cpf=dados.cpf, email=dados.email)

    user = User(
        name=dados.name,
        cpf=dados.cpf,
        email=dados.email,
        hashed_password=get_password_hash(dados.password),
        type=dados.type.value,
        status=UserStatus.PENDING.value,
        birth_date=dados.birth_date,
        assistant=dados.assistant,
        observations=dados.observations,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("Usuário cadastrado", user_id=user.id, type=user.type)
    log_audit_event(
        AuditEvent.USER_REGISTERED,
        user_id=user.id,
        request=request,
        details={"email": user.email, "type": user.type},
    )

    return {
        "message": "Usuário criado com sucesso",
        "user": UserResponse.model_validate(user).model_dump(by_alias=True, mode="json"),
    }
