# database/soft_delete.py
"""
Exclusão lógica (soft delete) como estado explícito.

Um registro está Ativo ou Excluido(em). Todas as consultas de listagem
passam por apenas_ativos(), o único ponto que conhece a coluna deleted_at.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from sqlalchemy import Column, DateTime
from sqlalchemy.orm import Query

from utils.timezone import get_utc_now


@dataclass(frozen=True)
class Ativo:
    pass


@dataclass(frozen=True)
class Excluido:
    em: datetime


EstadoRegistro = Union[Ativo, Excluido]


class SoftDeleteMixin:
    """Adiciona deleted_at e a API de estado aos models."""

    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    @property
    def estado(self) -> EstadoRegistro:
        if self.deleted_at is None:
            return Ativo()
        return Excluido(em=self.deleted_at)

    @property
    def excluido(self) -> bool:
        return isinstance(self.estado, Excluido)

    def excluir(self, em: Optional[datetime] = None) -> None:
        """Marca como excluído. Excluir de novo mantém a data original."""
        if self.deleted_at is None:
            self.deleted_at = em or get_utc_now()


def apenas_ativos(query: Query, model) -> Query:
    """Filtra a query para registros no estado Ativo."""
    return query.filter(model.deleted_at.is_(None))
