# sistemas/repair_orders/schemas.py
"""
Schemas Pydantic das guias e serviços

Entradas aceitam camelCase ou snake_case. Nas respostas, gcaf e duration
saem como string e valores monetários como número.
"""

import base64
from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import AfterValidator, AliasChoices, Field, computed_field, field_validator, model_validator
from werkzeug.utils import secure_filename

from auth.schemas import UserResumo
from config import ALLOWED_PHOTO_TYPES, MAX_PHOTO_SIZE, UPLOAD_URL_PREFIX
from sistemas.bases.schemas import BaseResumo
from sistemas.repair_orders.constants import (
    PLATE_MAX_LENGTH, ServiceCategory, ServiceStatus, ServiceType
)
from sistemas.repair_orders.financeiro import TotaisOrdem, calcular_totais, total_linha
from utils.schemas import CamelModel, Dinheiro, InteiroComoTexto
from utils.timezone import ensure_utc
from utils.validators import normalize_plate


def _validar_placa(v: str) -> str:
    placa = normalize_plate(v)
    if not placa or len(placa) > PLATE_MAX_LENGTH:
        raise ValueError(f"A placa deve ter entre 1 e {PLATE_MAX_LENGTH} caracteres")
    return placa


Placa = Annotated[str, AfterValidator(_validar_placa)]

Valor = Annotated[Decimal, Field(ge=0, max_digits=12, decimal_places=2)]


def validar_foto_data_uri(v: str) -> str:
    """data:<mime de imagem>;base64,<conteúdo> dentro de MAX_PHOTO_SIZE."""
    cabecalho, separador, dados = v.partition(",")
    if not separador or not cabecalho.startswith("data:") or not cabecalho.endswith(";base64"):
        raise ValueError("Foto deve ser um data URI base64 (data:image/...;base64,...)")

    mime = cabecalho[len("data:"):-len(";base64")]
    if mime not in ALLOWED_PHOTO_TYPES:
        raise ValueError(f"Tipo de foto não permitido: {mime}")

    try:
        conteudo = base64.b64decode(dados, validate=True)
    except ValueError:
        raise ValueError("Conteúdo base64 da foto inválido")

    if not conteudo:
        raise ValueError("Foto é obrigatória")
    if len(conteudo) > MAX_PHOTO_SIZE:
        raise ValueError(f"Foto excede o tamanho máximo de {MAX_PHOTO_SIZE // (1024 * 1024)}MB")
    return v


def validar_referencia_foto(v: str) -> str:
    """Data URI válido ou arquivo gravado em /uploads (nome sem diretórios)."""
    if v.startswith("data:"):
        return validar_foto_data_uri(v)

    prefixo = UPLOAD_URL_PREFIX + "/"
    nome = v[len(prefixo):] if v.startswith(prefixo) else ""
    if not nome or secure_filename(nome) != nome:
        raise ValueError(f"Foto deve ser um data URI ou um arquivo em {UPLOAD_URL_PREFIX}")
    return v


FotoDataUri = Annotated[str, AfterValidator(validar_foto_data_uri)]
FotoReferencia = Annotated[str, AfterValidator(validar_referencia_foto)]


# ==========================================
# Duração
# ==========================================

class DuracaoIn(CamelModel):
    """Período trabalhado {"from": ISO, "to": ISO}"""
    from_: datetime = Field(..., alias="from")
    to: datetime

    @model_validator(mode="after")
    def validar_periodo(self):
        if ensure_utc(self.to) < ensure_utc(self.from_):
            raise ValueError("A data final deve ser maior ou igual à data inicial")
        return self

    @property
    def milissegundos(self) -> int:
        delta = ensure_utc(self.to) - ensure_utc(self.from_)
        return int(delta.total_seconds() * 1000)


# ==========================================
# Serviços (entrada)
# ==========================================

class ServicoCreate(CamelModel):
    """Serviço lançado na criação da guia ou avulso"""
    quantity: int = Field(1, ge=1)
    item_id: str = Field(..., validation_alias=AliasChoices("itemId", "item", "item_id"))
    category: ServiceCategory
    type: ServiceType
    labor: str = ""
    # Sem valor informado, usa o valor de catálogo do item
    value: Optional[Valor] = None
    discount: Valor = Decimal("0")
    status: ServiceStatus = ServiceStatus.PENDING
    duration: DuracaoIn
    photo: Optional[FotoReferencia] = None


class ServicoBase64(ServicoCreate):
    """Serviço da guia criada pelo app (foto em data URI obrigatória)"""
    photo: FotoDataUri


class ServicoUpsert(CamelModel):
    """
    Serviço na atualização da guia: com id existente atualiza os campos
    enviados; sem id cria um novo (e aí valem as regras de criação).
    """
    id: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=1)
    item_id: Optional[str] = Field(None, validation_alias=AliasChoices("itemId", "item", "item_id"))
    category: Optional[ServiceCategory] = None
    type: Optional[ServiceType] = None
    labor: Optional[str] = None
    value: Optional[Valor] = None
    discount: Optional[Valor] = None
    status: Optional[ServiceStatus] = None
    duration: Optional[DuracaoIn] = None
    photo: Optional[FotoReferencia] = None


class ServicoUpdate(CamelModel):
    """PATCH avulso de serviço (multipart)"""
    quantity: Optional[int] = Field(None, ge=1)
    item_id: Optional[str] = None
    category: Optional[ServiceCategory] = None
    type: Optional[ServiceType] = None
    labor: Optional[str] = None
    value: Optional[Valor] = None
    discount: Optional[Valor] = None
    status: Optional[ServiceStatus] = None
    duration: Optional[DuracaoIn] = None


# ==========================================
# Guia (entrada)
# ==========================================

class RepairOrderCreate(CamelModel):
    """Cabeçalho da guia no POST multipart (os serviços vêm à parte)"""
    plate: Placa
    kilometers: int = Field(..., ge=0)
    base_id: str
    gcaf: Optional[int] = Field(None, ge=1)
    observations: Optional[str] = None
    discount: Valor = Decimal("0")
    user_ids: List[str] = Field(default_factory=list)


class RepairOrderBase64Create(CamelModel):
    """Guia criada pelo app com fotos em base64"""
    plate: Placa
    kilometers: int = Field(..., ge=0)
    base_id: str = Field(..., validation_alias=AliasChoices("base", "baseId", "base_id"))
    user_id: Optional[str] = Field(None, validation_alias=AliasChoices("userId", "user_id"))
    assistant_id: Optional[str] = Field(None, validation_alias=AliasChoices("assistantId", "assistant_id"))
    gcaf: Optional[int] = Field(None, ge=1)
    observations: Optional[str] = None
    services: List[ServicoBase64] = Field(default_factory=list)

    @field_validator("assistant_id")
    @classmethod
    def sem_assistente(cls, v: Optional[str]) -> Optional[str]:
        # O app envia "none" quando não há mecânico assistente
        if v is None or v.strip().lower() in ("", "none"):
            return None
        return v


class RepairOrderUpdate(CamelModel):
    """
    Atualização parcial da guia. status é texto livre aqui e é validado
    pelo ciclo de vida (valor fora da enumeração vira 400).
    """
    plate: Optional[Placa] = None
    kilometers: Optional[int] = Field(None, ge=0)
    base_id: Optional[str] = Field(None, validation_alias=AliasChoices("baseId", "base", "base_id"))
    status: Optional[str] = None
    observations: Optional[str] = None
    discount: Optional[Valor] = None
    gcaf: Optional[int] = Field(None, ge=1)
    user_ids: Optional[List[str]] = Field(None, validation_alias=AliasChoices("userIds", "user_ids"))
    services: Optional[List[ServicoUpsert]] = None


class IdsRequest(CamelModel):
    """Lista de ids para exportação e exclusão em lote"""
    ids: List[str] = Field(..., min_length=1)


# ==========================================
# Respostas
# ==========================================

class ServiceItemResumo(CamelModel):
    id: str
    name: str
    value: Dinheiro


class RepairOrderServiceResponse(CamelModel):
    id: str
    repair_order_id: str
    item_id: str
    item: Optional[ServiceItemResumo] = None
    quantity: int
    category: ServiceCategory
    type: ServiceType
    labor: str = ""
    value: Dinheiro
    discount: Dinheiro
    duration: InteiroComoTexto
    duration_from: Optional[datetime] = None
    duration_to: Optional[datetime] = None
    status: ServiceStatus
    photo: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @computed_field(alias="lineTotal")
    @property
    def line_total(self) -> float:
        return float(total_linha(self))


class TotaisResponse(CamelModel):
    subtotal: Dinheiro
    services_discount: Dinheiro
    order_discount: Dinheiro
    total_discount: Dinheiro
    total: Dinheiro
    display_total: Dinheiro
    services_count: int

    @classmethod
    def from_totais(cls, totais: TotaisOrdem) -> "TotaisResponse":
        return cls(
            subtotal=totais.subtotal,
            services_discount=totais.desconto_servicos,
            order_discount=totais.desconto_ordem,
            total_discount=totais.desconto_total,
            total=totais.total,
            display_total=totais.total_exibicao,
            services_count=totais.quantidade_servicos,
        )


class RepairOrderResumo(CamelModel):
    """Linha da listagem de guias"""
    id: str
    gcaf: InteiroComoTexto
    plate: str
    kilometers: int
    status: str
    base_id: str
    base: Optional[BaseResumo] = None
    discount: Dinheiro
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # Só os serviços ativos entram na guia
    services: List[RepairOrderServiceResponse] = Field(
        default_factory=list,
        validation_alias=AliasChoices("servicos_ativos", "services"),
    )

    @computed_field(alias="totals")
    @property
    def totals(self) -> TotaisResponse:
        return TotaisResponse.from_totais(calcular_totais(self))


class RepairOrderResponse(RepairOrderResumo):
    """Guia completa"""
    observations: Optional[str] = None
    users: List[UserResumo] = Field(default_factory=list)


class RepairOrderCriadaResponse(CamelModel):
    message: str
    id: str
    gcaf: InteiroComoTexto
