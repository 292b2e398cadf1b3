# tests/test_api_service_items.py
"""
Testes de integração do catálogo de itens (/api/v1/repair-order-service-items)
"""

from decimal import Decimal

from sistemas.service_items.models import ServiceItem

URL = "/api/v1/repair-order-service-items"


def test_criar_item(client, base_oficina):
    resp = client.post(URL, json={"name": "Alinhamento", "value": 80.5, "baseId": base_oficina.id})
    assert resp.status_code == 201
    corpo = resp.json()
    assert corpo["name"] == "Alinhamento"
    assert corpo["value"] == 80.5
    assert corpo["baseId"] == base_oficina.id
    assert corpo["deletedAt"] is None


def test_criar_item_em_base_inexistente(client):
    resp = client.post(URL, json={"name": "Alinhamento", "value": 10, "baseId": "nao-existe"})
    assert resp.status_code == 404


def test_valor_negativo(client):
    assert client.post(URL, json={"name": "X", "value": -1}).status_code == 400


def test_listar_filtra_por_base(client, base_oficina, item_servico):
    client.post(URL, json={"name": "Sem base", "value": 1})

    todos = client.get(URL).json()
    assert {i["name"] for i in todos} == {"Troca de óleo", "Sem base"}

    da_base = client.get(URL, params={"baseId": base_oficina.id}).json()
    assert [i["name"] for i in da_base] == ["Troca de óleo"]


def test_atualizar_item(client, item_servico):
    resp = client.patch(f"{URL}/{item_servico.id}", json={"value": 120})
    assert resp.status_code == 200
    assert resp.json()["value"] == 120
    assert resp.json()["name"] == "Troca de óleo"


def test_valor_nulo_responde_400(client, item_servico):
    resp = client.patch(f"{URL}/{item_servico.id}", json={"value": None})
    assert resp.status_code == 400
    assert client.get(f"{URL}/{item_servico.id}").json()["value"] == 100


def test_remover_base_do_item(client, item_servico):
    resp = client.patch(f"{URL}/{item_servico.id}", json={"baseId": None})
    assert resp.status_code == 200
    assert resp.json()["baseId"] is None


def test_exclusao_logica(client, db, item_servico):
    resp = client.delete(f"{URL}/{item_servico.id}")
    assert resp.status_code == 200
    corpo = resp.json()
    assert corpo["message"] == "Item deletado com sucesso"
    assert corpo["data"]["deletedAt"] is not None

    assert client.get(URL).json() == []
    assert client.get(f"{URL}/{item_servico.id}").status_code == 404

    # O registro continua no banco
    db.expire_all()
    registro = db.query(ServiceItem).filter(ServiceItem.id == item_servico.id).one()
    assert registro.excluido is True
    assert registro.value == Decimal("100.00")


def test_item_excluido_rejeitado_na_guia(client, item_servico, headers_mecanico, novo_servico, png_data_uri):
    client.delete(f"{URL}/{item_servico.id}")
    resp = client.post(
        "/api/v1/repair-orders-base64",
        json={
            "plate": "ABC1234", "kilometers": 10, "base": item_servico.base_id,
            "services": [novo_servico(item_servico.id, photo=png_data_uri)],
        },
        headers=headers_mecanico,
    )
    assert resp.status_code == 404
    assert resp.json()["message"] == "Item não encontrado"
