# sistemas/bases/schemas.py
"""
Schemas Pydantic de bases
"""

from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, Field

from utils.schemas import AtualizacaoParcial, CamelModel
from utils.validators import unformat_cep, validate_cep, validate_uf


def _validar_uf(v: str) -> str:
    if not validate_uf(v):
        raise ValueError("UF inválida")
    return v.upper()


def _validar_cep(v: str) -> str:
    if not validate_cep(v):
        raise ValueError("CEP deve ter 8 dígitos")
    return unformat_cep(v)


UF = Annotated[str, AfterValidator(_validar_uf)]
CEP = Annotated[str, AfterValidator(_validar_cep)]


class BaseAddressCreate(CamelModel):
    street: str = Field(..., min_length=1, max_length=200)
    number: str = Field(..., min_length=1, max_length=20)
    complement: Optional[str] = Field(None, max_length=200)
    neighborhood: str = Field(..., min_length=1, max_length=100)
    city: str = Field(..., min_length=1, max_length=100)
    state: UF
    zip_code: CEP


class BaseAddressUpdate(AtualizacaoParcial):
    campos_obrigatorios = frozenset({"street", "number", "neighborhood", "city", "state", "zip_code"})

    street: Optional[str] = Field(None, min_length=1, max_length=200)
    number: Optional[str] = Field(None, min_length=1, max_length=20)
    complement: Optional[str] = Field(None, max_length=200)
    neighborhood: Optional[str] = Field(None, min_length=1, max_length=100)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    state: Optional[UF] = None
    zip_code: Optional[CEP] = None


class BaseCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=30)
    address: BaseAddressCreate


class BaseUpdate(AtualizacaoParcial):
    campos_obrigatorios = frozenset({"name"})

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[BaseAddressUpdate] = None


class BaseAddressResponse(CamelModel):
    id: str
    street: str
    number: str
    complement: Optional[str] = None
    neighborhood: str
    city: str
    state: str
    zip_code: str


class BaseResponse(CamelModel):
    id: str
    name: str
    phone: Optional[str] = None
    address: Optional[BaseAddressResponse] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BaseResumo(CamelModel):
    id: str
    name: str
