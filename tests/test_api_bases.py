# tests/test_api_bases.py
"""
Testes de integração de bases (/api/v1/bases)

Testa:
- Criação com endereço e normalização de UF/CEP
- Nome único (409)
- Atualização parcial do endereço
- Exclusão bloqueada enquanto houver guia na base
"""


def _base(**extra):
    dados = {
        "name": "Sorocaba",
        "phone": "1532221111",
        "address": {
            "street": "Av. Itavuvu",
            "number": "2000",
            "neighborhood": "Jardim",
            "city": "Sorocaba",
            "state": "sp",
            "zipCode": "18078-005",
        },
    }
    dados.update(extra)
    return dados


class TestCriarBase:

    def test_cria_com_endereco(self, client):
        resp = client.post("/api/v1/bases", json=_base())
        assert resp.status_code == 201
        corpo = resp.json()
        assert corpo["name"] == "Sorocaba"
        assert corpo["address"]["state"] == "SP"
        assert corpo["address"]["zipCode"] == "18078005"

    def test_nome_duplicado(self, client, base_oficina):
        resp = client.post("/api/v1/bases", json=_base(name=base_oficina.name))
        assert resp.status_code == 409
        assert resp.json()["message"] == "Já existe uma base com o nome 'Boituva'"

    def test_uf_invalida(self, client):
        dados = _base()
        dados["address"]["state"] = "XX"
        resp = client.post("/api/v1/bases", json=dados)
        assert resp.status_code == 400
        assert resp.json()["error"] is True
        assert resp.json()["details"]

    def test_cep_invalido(self, client):
        dados = _base()
        dados["address"]["zipCode"] = "123"
        assert client.post("/api/v1/bases", json=dados).status_code == 400

    def test_sem_endereco(self, client):
        resp = client.post("/api/v1/bases", json={"name": "Sem endereço"})
        assert resp.status_code == 400


class TestConsultarBase:

    def test_listar(self, client, base_oficina):
        resp = client.get("/api/v1/bases")
        assert resp.status_code == 200
        assert [b["name"] for b in resp.json()] == ["Boituva"]

    def test_obter(self, client, base_oficina):
        resp = client.get(f"/api/v1/bases/{base_oficina.id}")
        assert resp.status_code == 200
        assert resp.json()["address"]["city"] == "Boituva"

    def test_obter_inexistente(self, client):
        resp = client.get("/api/v1/bases/nao-existe")
        assert resp.status_code == 404
        assert resp.json() == {"error": True, "message": "Base não encontrada"}


class TestAtualizarBase:

    def test_atualizacao_parcial_do_endereco(self, client, base_oficina):
        resp = client.patch(
            f"/api/v1/bases/{base_oficina.id}",
            json={"phone": "1533639999", "address": {"number": "200"}},
        )
        assert resp.status_code == 200
        corpo = resp.json()
        assert corpo["phone"] == "1533639999"
        assert corpo["address"]["number"] == "200"
        assert corpo["address"]["street"] == "Rua das Oficinas"

    def test_renomear_para_nome_existente(self, client, base_oficina):
        outra = client.post("/api/v1/bases", json=_base()).json()
        resp = client.patch(f"/api/v1/bases/{outra['id']}", json={"name": "Boituva"})
        assert resp.status_code == 409

    def test_manter_o_proprio_nome(self, client, base_oficina):
        resp = client.patch(f"/api/v1/bases/{base_oficina.id}", json={"name": "Boituva"})
        assert resp.status_code == 200

    def test_nome_nulo_responde_400(self, client, base_oficina):
        resp = client.patch(f"/api/v1/bases/{base_oficina.id}", json={"name": None})
        assert resp.status_code == 400
        assert client.get(f"/api/v1/bases/{base_oficina.id}").json()["name"] == "Boituva"

    def test_campo_obrigatorio_do_endereco_nulo_responde_400(self, client, base_oficina):
        resp = client.patch(f"/api/v1/bases/{base_oficina.id}", json={"address": {"city": None}})
        assert resp.status_code == 400

    def test_telefone_e_complemento_aceitam_nulo(self, client, base_oficina):
        resp = client.patch(
            f"/api/v1/bases/{base_oficina.id}",
            json={"phone": None, "address": {"complement": None}},
        )
        assert resp.status_code == 200
        assert resp.json()["phone"] is None


class TestExcluirBase:

    def test_exclui_base_sem_guias(self, client, base_oficina):
        resp = client.delete(f"/api/v1/bases/{base_oficina.id}")
        assert resp.status_code == 200
        assert resp.json() == {"message": "Base excluída com sucesso", "id": base_oficina.id}
        assert client.get(f"/api/v1/bases/{base_oficina.id}").status_code == 404

    def test_base_com_guia_nao_pode_ser_excluida(self, client, base_oficina, criar_ordem_api):
        criar_ordem_api()
        resp = client.delete(f"/api/v1/bases/{base_oficina.id}")
        assert resp.status_code == 409
        assert resp.json()["message"] == (
            "Não foi possível excluir pois existem 1 ordens de reparo relacionadas a base"
        )
        assert client.get(f"/api/v1/bases/{base_oficina.id}").status_code == 200

    def test_excluir_inexistente(self, client):
        assert client.delete("/api/v1/bases/nao-existe").status_code == 404
