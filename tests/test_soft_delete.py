# tests/test_soft_delete.py
"""
Testes da exclusão lógica (database/soft_delete.py)
"""

from datetime import datetime, timezone
from decimal import Decimal

from database.soft_delete import Ativo, Excluido, apenas_ativos
from sistemas.service_items.models import ServiceItem


def test_estado_inicial_ativo():
    item = ServiceItem(name="Alinhamento", value=Decimal("80"))
    assert item.estado == Ativo()
    assert item.excluido is False


def test_excluir_mantem_a_primeira_data():
    item = ServiceItem(name="Alinhamento", value=Decimal("80"))
    primeira = datetime(2026, 3, 1, tzinfo=timezone.utc)

    item.excluir(em=primeira)
    item.excluir(em=datetime(2026, 4, 1, tzinfo=timezone.utc))

    assert item.estado == Excluido(em=primeira)
    assert item.excluido is True


def test_apenas_ativos(db):
    ativo = ServiceItem(name="Balanceamento", value=Decimal("50"))
    excluido = ServiceItem(name="Geometria", value=Decimal("60"))
    excluido.excluir()
    db.add_all([ativo, excluido])
    db.commit()

    nomes = [i.name for i in apenas_ativos(db.query(ServiceItem), ServiceItem).all()]
    assert nomes == ["Balanceamento"]
