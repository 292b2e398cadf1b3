# sistemas/repair_orders/lifecycle.py
"""
Ciclo de vida da guia.

Não existe grafo de transições: qualquer um dos seis status pode ser
atribuído a partir de qualquer outro, inclusive saindo de CANCELLED.
A única regra é que o valor pertença à enumeração. O status dos serviços
é independente e nunca é derivado do status da guia (nem o contrário).
"""

from typing import Any, Mapping, Optional, Union

from sistemas.repair_orders.constants import RepairOrderStatus
from utils.exceptions import ValidacaoError
from utils.logging_config import get_logger

logger = get_logger(__name__)

VALORES_STATUS = [s.value for s in RepairOrderStatus]

# Campos do cabeçalho que podem ser alterados por atualização parcial
CAMPOS_CABECALHO = ("plate", "kilometers", "base_id", "observations", "discount", "gcaf")


def parse_status(value: Union[str, RepairOrderStatus, None]) -> RepairOrderStatus:
    """
    Converte o valor recebido em RepairOrderStatus.

    Raises:
        ValidacaoError: valor fora da enumeração
    """
    if isinstance(value, RepairOrderStatus):
        return value
    try:
        return RepairOrderStatus(value)
    except ValueError:
        raise ValidacaoError(
            "Status inválido",
            details=[{
                "loc": ["status"],
                "msg": f"Status deve ser um de: {', '.join(VALORES_STATUS)}",
                "input": value,
            }],
        )


def aplicar_status(order, value) -> RepairOrderStatus:
    """
    Valida e grava o status na guia, sem checar transição.

    Returns:
        O status aplicado
    """
    novo = parse_status(value)
    anterior = order.status
    order.status = novo.value

    if anterior != novo.value:
        logger.info(
            "Status da guia alterado",
            order_id=getattr(order, "id", None),
            de=anterior,
            para=novo.value,
        )
    return novo


def aplicar_atualizacao(order, payload: Mapping[str, Any]) -> Optional[RepairOrderStatus]:
    """
    Aplica uma atualização parcial ao cabeçalho da guia.

    Só os campos presentes no payload são alterados. O status, se presente,
    é validado antes de qualquer outro campo ser tocado; assim um status
    inválido não deixa a guia parcialmente alterada.

    Returns:
        O novo status, quando o payload trouxe status; None caso contrário
    """
    novo_status = None
    if "status" in payload:
        novo_status = parse_status(payload["status"])

    for campo in CAMPOS_CABECALHO:
        if campo in payload:
            setattr(order, campo, payload[campo])

    if novo_status is not None:
        aplicar_status(order, novo_status)

    return novo_status
