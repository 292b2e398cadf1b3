# sistemas/service_items/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from utils.schemas import AtualizacaoParcial, CamelModel, Dinheiro


class ServiceItemCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    value: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    base_id: Optional[str] = None


class ServiceItemUpdate(AtualizacaoParcial):
    campos_obrigatorios = frozenset({"name", "value"})

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    value: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    base_id: Optional[str] = None


class ServiceItemResponse(CamelModel):
    id: str
    name: str
    value: Dinheiro
    base_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
