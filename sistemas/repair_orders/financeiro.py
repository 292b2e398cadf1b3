# sistemas/repair_orders/financeiro.py
"""
Agregação financeira da guia.

Fórmula única, usada no JSON, no PDF e no BI:

    total_linha(s)  = (s.value - s.discount) * s.quantity
    subtotal        = soma(s.value * s.quantity)
    desconto_total  = soma(s.discount * s.quantity) + order.discount
    total           = subtotal - desconto_total

Serviços excluídos logicamente não entram na conta. Os valores gravados e
o total calculado nunca são truncados em zero; total_exibicao é a versão
para exibição, com piso zero.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

ZERO = Decimal("0")
CENTAVOS = Decimal("0.01")


def _decimal(valor) -> Decimal:
    if valor is None:
        return ZERO
    if isinstance(valor, Decimal):
        return valor
    return Decimal(str(valor))


def _ativos(servicos: Iterable) -> list:
    return [s for s in servicos if getattr(s, "deleted_at", None) is None]


def total_linha(servico) -> Decimal:
    """(valor - desconto) * quantidade de um serviço."""
    return (_decimal(servico.value) - _decimal(servico.discount)) * int(servico.quantity or 0)


@dataclass(frozen=True)
class TotaisOrdem:
    subtotal: Decimal
    desconto_servicos: Decimal
    desconto_ordem: Decimal
    desconto_total: Decimal
    total: Decimal
    quantidade_servicos: int

    @property
    def total_exibicao(self) -> Decimal:
        """Total com piso zero, só para exibição."""
        return max(self.total, ZERO)


def calcular_totais(order) -> TotaisOrdem:
    """
    Calcula os totais da guia a partir dos serviços ativos.

    Função pura: duas chamadas sobre a mesma guia dão o mesmo resultado.
    """
    servicos = _ativos(order.services or [])

    subtotal = sum(
        (_decimal(s.value) * int(s.quantity or 0) for s in servicos), ZERO
    )
    desconto_servicos = sum(
        (_decimal(s.discount) * int(s.quantity or 0) for s in servicos), ZERO
    )
    desconto_ordem = _decimal(order.discount)
    desconto_total = desconto_servicos + desconto_ordem

    return TotaisOrdem(
        subtotal=subtotal.quantize(CENTAVOS),
        desconto_servicos=desconto_servicos.quantize(CENTAVOS),
        desconto_ordem=desconto_ordem.quantize(CENTAVOS),
        desconto_total=desconto_total.quantize(CENTAVOS),
        total=(subtotal - desconto_total).quantize(CENTAVOS),
        quantidade_servicos=len(servicos),
    )


def formatar_moeda(valor) -> str:
    """Formata em reais: 1234.5 -> 'R$ 1.234,50'."""
    texto = f"{_decimal(valor).quantize(CENTAVOS):,.2f}"
    return "R$ " + texto.replace(",", "X").replace(".", ",").replace("X", ".")
