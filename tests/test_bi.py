# tests/test_bi.py
"""
Testes do painel de BI (/api/v1/bi/summary)
"""

URL = "/api/v1/bi/summary"


def _contagem(lista, chave, valor):
    return next(x["count"] for x in lista if x[chave] == valor)


def test_resumo_vazio(client, headers_orcamentista):
    resp = client.get(URL, headers=headers_orcamentista)
    assert resp.status_code == 200
    corpo = resp.json()
    assert len(corpo["ordersByStatus"]) == 6
    assert all(x["count"] == 0 for x in corpo["ordersByStatus"])
    assert corpo["ordersByMonth"] == []
    assert corpo["servicesByBase"] == []
    assert corpo["totals"]["total"] == 0.0


def test_resumo_com_guias(
    client, headers_orcamentista, criar_ordem_api, item_servico, novo_servico, png_data_uri
):
    a = criar_ordem_api()
    criar_ordem_api(plate="XYZ9876", servicos=[
        novo_servico(item_servico.id, photo=png_data_uri, category="MATERIAL", value=50, quantity=2),
    ])
    client.patch(f"/api/v1/repair-orders/{a['id']}", json={"status": "APPROVED", "discount": 10})

    corpo = client.get(URL, headers=headers_orcamentista).json()

    assert _contagem(corpo["ordersByStatus"], "status", "APPROVED") == 1
    assert _contagem(corpo["ordersByStatus"], "status", "PENDING") == 1
    assert sum(m["count"] for m in corpo["ordersByMonth"]) == 2
    assert corpo["servicesByBase"] == [{"baseId": item_servico.base_id, "name": "Boituva", "count": 2}]
    assert _contagem(corpo["servicesByCategory"], "category", "LABOR") == 1
    assert _contagem(corpo["servicesByCategory"], "category", "MATERIAL") == 1
    assert corpo["totals"] == {
        "subtotal": 200.0,
        "totalDiscount": 10.0,
        "total": 190.0,
        "byStatus": {
            "PENDING": 100.0,
            "REVISION": 0.0,
            "APPROVED": 90.0,
            "PARTIALLY_APPROVED": 0.0,
            "INVOICE_APPROVED": 0.0,
            "CANCELLED": 0.0,
        },
    }


def test_filtro_por_base(client, headers_orcamentista, criar_ordem_api):
    criar_ordem_api()
    corpo = client.get(URL, params={"baseId": "outra"}, headers=headers_orcamentista).json()
    assert all(x["count"] == 0 for x in corpo["ordersByStatus"])
    assert corpo["totals"]["total"] == 0.0
    assert corpo["servicesByBase"] == []
    assert all(x["count"] == 0 for x in corpo["servicesByCategory"])


def test_filtro_por_base_mantem_servicos_da_base(client, headers_orcamentista, criar_ordem_api, base_oficina):
    criar_ordem_api()
    corpo = client.get(URL, params={"baseId": base_oficina.id}, headers=headers_orcamentista).json()
    assert [x["baseId"] for x in corpo["servicesByBase"]] == [base_oficina.id]
    assert _contagem(corpo["servicesByCategory"], "category", "LABOR") == 1


def test_mecanico_nao_acessa(client, headers_mecanico):
    assert client.get(URL, headers=headers_mecanico).status_code == 403
