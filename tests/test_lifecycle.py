# tests/test_lifecycle.py
"""
Testes do ciclo de vida da guia (sistemas/repair_orders/lifecycle.py)

Qualquer status pode ser atribuído a partir de qualquer outro; valor fora
da enumeração é rejeitado sem alterar a guia.
"""

import itertools
from types import SimpleNamespace

import pytest

from sistemas.repair_orders.constants import RepairOrderStatus
from sistemas.repair_orders.lifecycle import aplicar_atualizacao, aplicar_status, parse_status
from utils.exceptions import ValidacaoError


def _ordem(**campos):
    padrao = dict(
        id="o1", status="PENDING", plate="ABC1234", kilometers=1000,
        base_id="b1", observations=None, discount=0, gcaf=1,
    )
    padrao.update(campos)
    return SimpleNamespace(**padrao)


@pytest.mark.parametrize(
    "de,para",
    list(itertools.product(RepairOrderStatus, RepairOrderStatus)),
)
def test_qualquer_transicao_e_permitida(de, para):
    ordem = _ordem(status=de.value)
    assert aplicar_status(ordem, para.value) == para
    assert ordem.status == para.value


def test_parse_status_aceita_enum():
    assert parse_status(RepairOrderStatus.CANCELLED) is RepairOrderStatus.CANCELLED


@pytest.mark.parametrize("valor", ["DONE", "pending", "", None])
def test_status_invalido_levanta_validacao(valor):
    with pytest.raises(ValidacaoError) as exc:
        parse_status(valor)
    assert exc.value.status_code == 400
    assert exc.value.details[0]["loc"] == ["status"]


def test_status_invalido_nao_altera_guia():
    ordem = _ordem()
    with pytest.raises(ValidacaoError):
        aplicar_atualizacao(ordem, {"plate": "XYZ9876", "status": "DONE"})
    assert ordem.plate == "ABC1234"
    assert ordem.status == "PENDING"


def test_atualizacao_parcial_so_altera_campos_presentes():
    ordem = _ordem()
    novo = aplicar_atualizacao(ordem, {"kilometers": 1500, "observations": "Revisão"})
    assert novo is None
    assert ordem.kilometers == 1500
    assert ordem.observations == "Revisão"
    assert ordem.plate == "ABC1234"
    assert ordem.status == "PENDING"


def test_atualizacao_com_status():
    ordem = _ordem(status="CANCELLED")
    novo = aplicar_atualizacao(ordem, {"status": "PENDING", "discount": 5})
    assert novo == RepairOrderStatus.PENDING
    assert ordem.status == "PENDING"
    assert ordem.discount == 5


def test_campos_fora_do_cabecalho_sao_ignorados():
    ordem = _ordem()
    aplicar_atualizacao(ordem, {"id": "outro", "created_at": "ontem"})
    assert ordem.id == "o1"
    assert not hasattr(ordem, "created_at")
