# tests/test_paginas.py
"""
Testes das páginas do portal e do portão de autorização aplicado pelo
middleware (a matriz completa está em test_gate.py).
"""

import pytest

from auth.models import UserStatus


def _login(client, user):
    resp = client.post("/api/v1/login", json={"email": user.email, "password": "senha123"})
    assert resp.status_code == 200


def test_health(client):
    assert client.get("/health").json() == {"status": "ok", "service": "portal-frota"}


def test_raiz_vai_para_o_dashboard(client):
    resp = client.get("/", follow_redirects=False)
    assert resp.status_code == 307
    assert resp.headers["location"] == "/dashboard/repair-orders"


@pytest.mark.parametrize("path", ["/login", "/register"])
def test_paginas_publicas(client, path):
    resp = client.get(path)
    assert resp.status_code == 200
    assert "text/html" in resp.headers["content-type"]


@pytest.mark.parametrize("path", ["/dashboard/repair-orders", "/repair-order", "/registration-pending"])
def test_anonimo_vai_para_o_login(client, path):
    resp = client.get(path, follow_redirects=False)
    assert resp.status_code == 307
    assert resp.headers["location"] == "/login"


def test_orcamentista_acessa_o_dashboard(client, orcamentista):
    _login(client, orcamentista)
    resp = client.get("/dashboard/bi")
    assert resp.status_code == 200
    assert "text/html" in resp.headers["content-type"]


def test_orcamentista_logado_nao_ve_o_login(client, orcamentista):
    _login(client, orcamentista)
    resp = client.get("/login", follow_redirects=False)
    assert resp.headers["location"] == "/dashboard/repair-orders"


def test_mecanico_vai_para_a_guia(client, mecanico):
    _login(client, mecanico)
    resp = client.get("/dashboard/bases", follow_redirects=False)
    assert resp.status_code == 307
    assert resp.headers["location"] == "/repair-order"

    assert client.get("/repair-order").status_code == 200


def test_cadastro_pendente(client, criar_usuario):
    pendente = criar_usuario("pendente@frota.com.br", "39053344705", status=UserStatus.PENDING)
    _login(client, pendente)

    resp = client.get("/repair-order", follow_redirects=False)
    assert resp.headers["location"] == "/registration-pending"
    assert client.get("/registration-pending").status_code == 200


def test_api_nunca_e_redirecionada(client):
    resp = client.get("/api/v1/me", follow_redirects=False)
    assert resp.status_code == 401
