"""
Validadores centralizados do Portal Frota.

Fornece funções de validação reutilizáveis para:
- CPF (dígitos verificadores)
- Placa de veículo
- UF e CEP de endereços das bases

USO:
    from utils.validators import validate_cpf, format_cpf, normalize_plate

    if not validate_cpf(cpf):
        raise ValueError("CPF inválido")
"""

import re
from typing import Optional


UFS_VALIDAS = {
    "AC", "AL", "AP", "AM", "BA", "CE", "DF", "ES", "GO", "MA", "MT", "MS",
    "MG", "PA", "PB", "PR", "PE", "PI", "RJ", "RN", "RS", "RO", "RR", "SC",
    "SP", "SE", "TO",
}


# ============================================
# CPF
# ============================================

def unformat_cpf(cpf: str) -> str:
    """Remove a formatação de um CPF, mantendo apenas os dígitos."""
    return re.sub(r"\D", "", str(cpf or ""))


def _digito_verificador(digitos: str) -> int:
    """
    Calcula um dígito verificador do CPF.

    Pesos decrescentes a partir de len(digitos) + 1 até 2.
    """
    peso_inicial = len(digitos) + 1
    soma = sum(int(d) * (peso_inicial - i) for i, d in enumerate(digitos))
    digito = 11 - (soma % 11)
    return 0 if digito >= 10 else digito


def validate_cpf(cpf: str) -> bool:
    """
    Valida um CPF brasileiro.

    Args:
        cpf: CPF com ou sem formatação

    Returns:
        True se os dois dígitos verificadores conferem
    """
    cpf = unformat_cpf(cpf)

    if len(cpf) != 11:
        return False

    # Todos iguais passam na conta mas não são CPFs válidos
    if cpf == cpf[0] * 11:
        return False

    if _digito_verificador(cpf[:9]) != int(cpf[9]):
        return False

    return _digito_verificador(cpf[:10]) == int(cpf[10])


def format_cpf(cpf: str) -> str:
    """
    Formata um CPF como XXX.XXX.XXX-XX.

    Valores que não têm 11 dígitos são devolvidos sem alteração.
    """
    digitos = unformat_cpf(cpf)
    if len(digitos) != 11:
        return cpf
    return f"{digitos[:3]}.{digitos[3:6]}.{digitos[6:9]}-{digitos[9:]}"


# ============================================
# VEÍCULO
# ============================================

def normalize_plate(plate: Optional[str]) -> str:
    """Remove espaços e hífens e coloca a placa em maiúsculas."""
    return re.sub(r"[\s-]", "", plate or "").upper()


# ============================================
# ENDEREÇO
# ============================================

def validate_uf(uf: str) -> bool:
    """Valida sigla de unidade federativa (2 letras)."""
    return (uf or "").upper() in UFS_VALIDAS


def unformat_cep(cep: str) -> str:
    return re.sub(r"\D", "", str(cep or ""))


def validate_cep(cep: str) -> bool:
    """CEP válido tem 8 dígitos."""
    return len(unformat_cep(cep)) == 8
