# auth/security.py
"""
Funções de segurança: hash de senha (bcrypt) e JWT
"""

from datetime import timedelta
from typing import Optional
from jose import JWTError, jwt
import bcrypt

from config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES, BCRYPT_ROUNDS
from utils.timezone import now_utc


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verifica se a senha plain corresponde ao hash"""
    try:
        return bcrypt.checkpw(
            plain_password.encode('utf-8'),
            hashed_password.encode('utf-8')
        )
    except ValueError:
        # Hash armazenado não é bcrypt
        return False


def get_password_hash(password: str, rounds: Optional[int] = None) -> str:
    """Gera hash da senha com custo BCRYPT_ROUNDS"""
    return bcrypt.hashpw(
        password.encode('utf-8'),
        bcrypt.gensalt(rounds=rounds or BCRYPT_ROUNDS)
    ).decode('utf-8')


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Cria um token JWT com os dados fornecidos.

    Args:
        data: Dicionário com dados a serem codificados (ex: {"sub": user_id})
        expires_delta: Tempo de expiração customizado

    Returns:
        Token JWT como string
    """
    to_encode = data.copy()

    if expires_delta:
        expire = now_utc() + expires_delta
    else:
        expire = now_utc() + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def create_session_token(user, expires_delta: Optional[timedelta] = None) -> str:
    """Token de sessão com o perfil do usuário (id, tipo, status e dados de exibição)."""
    return create_access_token(
        data={
            "sub": user.id,
            "name": user.name,
            "email": user.email,
            "type": user.type,
            "status": user.status,
            "assistant": bool(user.assistant),
        },
        expires_delta=expires_delta,
    )


def decode_token(token: str) -> Optional[dict]:
    """
    Decodifica um token JWT.

    Returns:
        Dicionário com dados do token ou None se inválido/expirado
    """
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
