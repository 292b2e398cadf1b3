# tests/test_request_id.py
"""
Testes do RequestIDMiddleware (middleware/request_id.py)
"""

from middleware.request_id import REQUEST_ID_HEADER, get_request_id


def test_gera_request_id(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert len(resp.headers[REQUEST_ID_HEADER]) == 36


def test_reaproveita_request_id_recebido(client):
    resp = client.get("/health", headers={REQUEST_ID_HEADER: "abc-123"})
    assert resp.headers[REQUEST_ID_HEADER] == "abc-123"


def test_request_id_recebido_e_truncado(client):
    resp = client.get("/health", headers={REQUEST_ID_HEADER: "x" * 200})
    assert resp.headers[REQUEST_ID_HEADER] == "x" * 64


def test_presente_tambem_nas_respostas_de_erro(client):
    resp = client.get("/api/v1/repair-orders/nao-existe")
    assert resp.status_code == 404
    assert REQUEST_ID_HEADER in resp.headers


def test_fora_de_requisicao_e_none():
    assert get_request_id() is None
