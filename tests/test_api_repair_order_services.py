# tests/test_api_repair_order_services.py
"""
Testes de integração dos serviços avulsos (/api/v1/repair-order-services)
"""

import json

URL = "/api/v1/repair-order-services"


def _form(order_id, item_id, duracao, **extra):
    dados = {
        "repairOrderId": order_id, "itemId": item_id,
        "category": "LABOR", "type": "HELP", "value": "60", "duration": json.dumps(duracao),
    }
    dados.update(extra)
    return dados


def _primeiro_servico(client, order_id):
    return client.get(URL, params={"repairOrderId": order_id}).json()[0]


def test_criar_servico(client, criar_ordem_api, item_servico, png, duracao):
    criada = criar_ordem_api(servicos=[])
    resp = client.post(
        URL, data=_form(criada["id"], item_servico.id, duracao),
        files={"photo": ("foto.png", png, "image/png")},
    )
    assert resp.status_code == 201, resp.text
    corpo = resp.json()
    assert corpo["repairOrderId"] == criada["id"]
    assert corpo["type"] == "HELP"
    assert corpo["quantity"] == 1
    assert corpo["item"]["name"] == "Troca de óleo"


def test_criar_sem_foto(client, criar_ordem_api, item_servico, duracao):
    criada = criar_ordem_api(servicos=[])
    resp = client.post(URL, data=_form(criada["id"], item_servico.id, duracao))
    assert resp.status_code == 400


def test_categoria_invalida(client, criar_ordem_api, item_servico, png, duracao):
    criada = criar_ordem_api(servicos=[])
    resp = client.post(
        URL, data=_form(criada["id"], item_servico.id, duracao, category="PINTURA"),
        files={"photo": ("foto.png", png, "image/png")},
    )
    assert resp.status_code == 400


def test_listar_por_guia(client, criar_ordem_api):
    a = criar_ordem_api()
    criar_ordem_api(plate="XYZ9876")
    assert len(client.get(URL).json()) == 2
    servicos = client.get(URL, params={"repairOrderId": a["id"]}).json()
    assert [s["repairOrderId"] for s in servicos] == [a["id"]]


def test_atualizar_mantem_foto(client, criar_ordem_api):
    criada = criar_ordem_api()
    servico = _primeiro_servico(client, criada["id"])

    resp = client.patch(f"{URL}/{servico['id']}", data={"quantity": "4", "status": "APPROVED"})
    assert resp.status_code == 200, resp.text
    corpo = resp.json()
    assert corpo["quantity"] == 4
    assert corpo["status"] == "APPROVED"
    assert corpo["photo"] == servico["photo"]
    assert corpo["lineTotal"] == 400.0


def test_atualizar_com_foto_nova(client, criar_ordem_api, png):
    criada = criar_ordem_api()
    servico = _primeiro_servico(client, criada["id"])

    resp = client.patch(
        f"{URL}/{servico['id']}", data={"labor": "Pedro"},
        files={"photo": ("nova.png", png, "image/png")},
    )
    assert resp.status_code == 200
    assert resp.json()["labor"] == "Pedro"
    assert resp.json()["photo"].startswith("data:image/png;base64,")


def test_atualizar_com_photo_url(client, criar_ordem_api):
    criada = criar_ordem_api()
    servico = _primeiro_servico(client, criada["id"])

    resp = client.patch(f"{URL}/{servico['id']}", data={"photoUrl": "/uploads/outra.png"})
    assert resp.json()["photo"] == "/uploads/outra.png"


def test_photo_url_fora_de_uploads_e_rejeitada(client, criar_ordem_api):
    criada = criar_ordem_api()
    servico = _primeiro_servico(client, criada["id"])

    for url in ("/uploads/../../etc/passwd", "/etc/passwd", "data:text/plain;base64,b2k="):
        resp = client.patch(f"{URL}/{servico['id']}", data={"photoUrl": url})
        assert resp.status_code == 400, url
        assert resp.json()["details"][0]["loc"] == ["photoUrl"]

    assert _primeiro_servico(client, criada["id"])["photo"] == servico["photo"]


def test_atualizar_duracao(client, criar_ordem_api):
    criada = criar_ordem_api()
    servico = _primeiro_servico(client, criada["id"])

    duracao = {"from": "2026-03-01T08:00:00Z", "to": "2026-03-01T08:01:00Z"}
    resp = client.patch(f"{URL}/{servico['id']}", data={"duration": json.dumps(duracao)})
    assert resp.json()["duration"] == "60000"


def test_exclusao_logica(client, criar_ordem_api):
    criada = criar_ordem_api()
    servico = _primeiro_servico(client, criada["id"])

    resp = client.delete(f"{URL}/{servico['id']}")
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert resp.json()["data"]["deletedAt"] is not None

    # Some das listagens e dos totais, mas o detalhe continua acessível
    assert client.get(URL, params={"repairOrderId": criada["id"]}).json() == []
    ordem = client.get(f"/api/v1/repair-orders/{criada['id']}").json()
    assert ordem["services"] == []
    assert ordem["totals"]["total"] == 0.0

    detalhe = client.get(f"{URL}/{servico['id']}")
    assert detalhe.status_code == 200
    assert detalhe.json()["deletedAt"] is not None


def test_servico_excluido_nao_pode_ser_alterado(client, criar_ordem_api):
    criada = criar_ordem_api()
    servico = _primeiro_servico(client, criada["id"])
    client.delete(f"{URL}/{servico['id']}")

    assert client.patch(f"{URL}/{servico['id']}", data={"quantity": "2"}).status_code == 404
    assert client.delete(f"{URL}/{servico['id']}").status_code == 404


def test_servico_inexistente(client):
    resp = client.get(f"{URL}/nao-existe")
    assert resp.status_code == 404
    assert resp.json()["message"] == "Serviço não encontrado"
