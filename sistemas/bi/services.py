# sistemas/bi/services.py
"""
Agregações do painel de BI.

As contagens por status e categoria saem de GROUP BY no banco. Mês e
valores são consolidados em Python, com as mesmas regras de financeiro.py,
para não depender de funções de data específicas do banco.
"""

from collections import OrderedDict
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from database.soft_delete import apenas_ativos
from sistemas.bases.models import Base
from sistemas.repair_orders.constants import (
    CATEGORY_LABELS, STATUS_LABELS, RepairOrderStatus, ServiceCategory
)
from sistemas.repair_orders.financeiro import ZERO, calcular_totais
from sistemas.repair_orders.models import RepairOrder, RepairOrderService
from utils.logging_config import get_logger
from utils.timezone import to_local

logger = get_logger(__name__)


def ordens_por_status(db: Session) -> List[Dict]:
    """Todas as situações, inclusive as sem guia (contagem 0)."""
    contagem = dict(
        db.query(RepairOrder.status, func.count(RepairOrder.id))
        .group_by(RepairOrder.status)
        .all()
    )
    return [
        {"status": status.value, "label": STATUS_LABELS[status], "count": contagem.get(status.value, 0)}
        for status in RepairOrderStatus
    ]


def ordens_por_mes(ordens: List[RepairOrder]) -> List[Dict]:
    """Guias criadas por mês (AAAA-MM, fuso local), em ordem cronológica."""
    meses: Dict[str, int] = {}
    for ordem in ordens:
        criada = to_local(ordem.created_at)
        if criada is None:
            continue
        chave = criada.strftime("%Y-%m")
        meses[chave] = meses.get(chave, 0) + 1
    return [{"month": mes, "count": meses[mes]} for mes in sorted(meses)]


def servicos_por_base(db: Session, base_id: Optional[str] = None) -> List[Dict]:
    """Serviços ativos agrupados pela base da guia."""
    query = (
        db.query(Base.id, Base.name, func.count(RepairOrderService.id))
        .join(RepairOrder, RepairOrder.base_id == Base.id)
        .join(RepairOrderService, RepairOrderService.repair_order_id == RepairOrder.id)
    )
    if base_id:
        query = query.filter(RepairOrder.base_id == base_id)
    linhas = (
        apenas_ativos(query, RepairOrderService)
        .group_by(Base.id, Base.name)
        .order_by(Base.name)
        .all()
    )
    return [{"baseId": id_base, "name": nome, "count": total} for id_base, nome, total in linhas]


def servicos_por_categoria(db: Session, base_id: Optional[str] = None) -> List[Dict]:
    query = db.query(RepairOrderService.category, func.count(RepairOrderService.id))
    if base_id:
        query = (
            query.join(RepairOrder, RepairOrderService.repair_order_id == RepairOrder.id)
            .filter(RepairOrder.base_id == base_id)
        )
    contagem = dict(
        apenas_ativos(query, RepairOrderService)
        .group_by(RepairOrderService.category)
        .all()
    )
    return [
        {"category": categoria.value, "label": CATEGORY_LABELS[categoria], "count": contagem.get(categoria.value, 0)}
        for categoria in ServiceCategory
    ]


def valores_consolidados(ordens: List[RepairOrder]) -> Dict:
    """Soma dos totais de todas as guias (mesma fórmula da guia)."""
    subtotal = desconto = total = ZERO
    por_status: "OrderedDict[str, Decimal]" = OrderedDict((s.value, ZERO) for s in RepairOrderStatus)

    for ordem in ordens:
        totais = calcular_totais(ordem)
        subtotal += totais.subtotal
        desconto += totais.desconto_total
        total += totais.total
        if ordem.status in por_status:
            por_status[ordem.status] += totais.total

    return {
        "subtotal": float(subtotal),
        "totalDiscount": float(desconto),
        "total": float(total),
        "byStatus": {status: float(valor) for status, valor in por_status.items()},
    }


def resumo(db: Session, base_id: Optional[str] = None) -> Dict:
    """
    Monta o resumo do painel.

    Args:
        base_id: restringe todas as contagens e os valores a uma base

    Returns:
        dict com ordersByStatus, ordersByMonth, servicesByBase,
        servicesByCategory e totals
    """
    query = db.query(RepairOrder).options(selectinload(RepairOrder.services))
    if base_id:
        query = query.filter(RepairOrder.base_id == base_id)
    ordens = query.all()

    por_status = ordens_por_status(db) if not base_id else [
        {"status": s.value, "label": STATUS_LABELS[s], "count": sum(1 for o in ordens if o.status == s.value)}
        for s in RepairOrderStatus
    ]

    logger.info("Resumo de BI calculado", guias=len(ordens), base_id=base_id)

    return {
        "ordersByStatus": por_status,
        "ordersByMonth": ordens_por_mes(ordens),
        "servicesByBase": servicos_por_base(db, base_id),
        "servicesByCategory": servicos_por_categoria(db, base_id),
        "totals": valores_consolidados(ordens),
    }
