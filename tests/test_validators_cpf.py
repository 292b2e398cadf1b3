# tests/test_validators_cpf.py
"""
Testes dos validadores (utils/validators.py)

Testa:
- Dígitos verificadores do CPF
- Formatação e remoção de formatação
- Normalização de placa, UF e CEP
"""

import pytest

from utils.validators import (
    format_cpf, normalize_plate, unformat_cpf, validate_cep, validate_cpf, validate_uf
)


class TestValidateCpf:

    @pytest.mark.parametrize("cpf", [
        "52998224725",
        "529.982.247-25",
        "11144477735",
        "111.444.777-35",
    ])
    def test_cpfs_validos(self, cpf):
        assert validate_cpf(cpf) is True

    @pytest.mark.parametrize("cpf", [
        "52998224724",   # segundo dígito errado
        "52998224715",   # primeiro dígito errado
        "5299822472",    # 10 dígitos
        "529982247250",  # 12 dígitos
        "",
        "abc",
    ])
    def test_cpfs_invalidos(self, cpf):
        assert validate_cpf(cpf) is False

    @pytest.mark.parametrize("digito", "0123456789")
    def test_todos_digitos_iguais_sao_invalidos(self, digito):
        assert validate_cpf(digito * 11) is False

    def test_none_e_invalido(self):
        assert validate_cpf(None) is False


class TestFormatacaoCpf:

    def test_unformat_remove_pontuacao(self):
        assert unformat_cpf("529.982.247-25") == "52998224725"

    def test_format_cpf(self):
        assert format_cpf("52998224725") == "529.982.247-25"

    def test_format_mantem_valor_sem_11_digitos(self):
        assert format_cpf("123") == "123"


class TestOutrosValidadores:

    def test_normalize_plate(self):
        assert normalize_plate(" abc-1d23 ") == "ABC1D23"

    def test_normalize_plate_none(self):
        assert normalize_plate(None) == ""

    def test_validate_uf(self):
        assert validate_uf("sp") is True
        assert validate_uf("XX") is False

    def test_validate_cep(self):
        assert validate_cep("18550-000") is True
        assert validate_cep("1855000") is False
