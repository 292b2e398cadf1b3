# auth/schemas.py
"""
Schemas Pydantic para autenticação e usuários
"""

from datetime import date, datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from auth.models import UserStatus, UserType
from utils.schemas import AtualizacaoParcial, CamelModel
from utils.validators import unformat_cpf, validate_cpf


# ==========================================
# Schemas de Token
# ==========================================

class Token(CamelModel):
    """Token JWT retornado no login"""
    access_token: str
    token_type: str = "bearer"


class LoginRequest(CamelModel):
    """Request de login (o email só é usado na busca exata)"""
    email: str = Field(..., min_length=1, max_length=200)
    password: str = Field(..., min_length=1)


# ==========================================
# Schemas de Usuário
# ==========================================

def _tipo_maiusculo(v):
    # O formulário de cadastro envia "mechanic"/"budgetist"
    if isinstance(v, str):
        return v.upper()
    return v


class UserRegister(CamelModel):
    """Cadastro público (auto-registro). O status é sempre PENDING."""
    name: str = Field(..., min_length=2, max_length=200)
    cpf: str
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=100)
    type: UserType
    birth_date: date
    assistant: bool = False
    observations: Optional[str] = Field(None, max_length=2000)

    @field_validator("cpf")
    @classmethod
    def validar_cpf(cls, v: str) -> str:
        if not validate_cpf(v):
            raise ValueError("CPF inválido")
        return unformat_cpf(v)

    @field_validator("type", mode="before")
    @classmethod
    def normalizar_tipo(cls, v):
        return _tipo_maiusculo(v)


class UserCreate(UserRegister):
    """Criação de usuário pelo dashboard. Mesmas regras do cadastro."""
    pass


class UserUpdate(AtualizacaoParcial):
    """Atualização parcial. status só pode ser alterado por um aprovador."""
    campos_obrigatorios = frozenset({"name", "cpf", "email", "password", "type", "status", "assistant"})

    name: Optional[str] = Field(None, min_length=2, max_length=200)
    cpf: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6, max_length=100)
    type: Optional[UserType] = None
    status: Optional[UserStatus] = None
    birth_date: Optional[date] = None
    assistant: Optional[bool] = None
    observations: Optional[str] = Field(None, max_length=2000)

    @field_validator("cpf")
    @classmethod
    def validar_cpf(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not validate_cpf(v):
            raise ValueError("CPF inválido")
        return unformat_cpf(v)

    @field_validator("type", "status", mode="before")
    @classmethod
    def normalizar_enum(cls, v):
        return _tipo_maiusculo(v)


class UserResponse(CamelModel):
    """Dados públicos do usuário (sem hash de senha)"""
    id: str
    name: str
    cpf: str
    email: str
    type: UserType
    status: UserStatus
    birth_date: Optional[date] = None
    assistant: bool
    observations: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserResumo(CamelModel):
    """Usuário atribuído a uma guia"""
    id: str
    name: str
    email: str
    type: UserType


class SessionUser(CamelModel):
    """Schema de /me - dados da sessão"""
    id: str
    name: str
    email: str
    type: UserType
    status: UserStatus
    assistant: bool
