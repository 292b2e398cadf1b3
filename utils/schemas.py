# utils/schemas.py
"""
Base comum dos schemas da API.

A API expõe chaves em camelCase (repairOrderId, deletedAt, ...); os
models Python continuam em snake_case. Requisições aceitam as duas formas.
"""

from decimal import Decimal
from typing import Annotated, ClassVar, FrozenSet

from pydantic import BaseModel, ConfigDict, PlainSerializer, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class AtualizacaoParcial(CamelModel):
    """
    Base dos schemas de PATCH. Campo omitido não é alterado; null explícito
    só é aceito nos campos fora de campos_obrigatorios.
    """
    campos_obrigatorios: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="after")
    def rejeitar_nulos(self):
        nulos = sorted(
            campo for campo in self.model_fields_set
            if campo in self.campos_obrigatorios and getattr(self, campo) is None
        )
        if nulos:
            raise ValueError(f"Campos obrigatórios não podem ser nulos: {', '.join(nulos)}")
        return self


class MensagemResponse(CamelModel):
    """Resposta simples de sucesso"""
    message: str


# Dinheiro trafega como número no JSON (Decimal vira string por padrão)
Dinheiro = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]

# Identificadores grandes (gcaf) e durações em ms trafegam como string
InteiroComoTexto = Annotated[
    int,
    PlainSerializer(str, return_type=str, when_used="json"),
]
