# utils/exceptions.py
"""
Exceções de domínio do Portal Frota.

Os serviços levantam estas exceções; main.py as converte em respostas
JSON no formato {"error": true, "message": ..., "details": ...}.
"""

from typing import Any, Optional


class PortalFrotaError(Exception):
    """Erro base do domínio"""

    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidacaoError(PortalFrotaError):
    """Payload inválido (campo ausente, formato ou valor fora do domínio)"""
    status_code = 400


class NaoAutenticadoError(PortalFrotaError):
    """Operação exige sessão"""
    status_code = 401


class AcessoNegadoError(PortalFrotaError):
    """Sessão sem o perfil ou status exigido"""
    status_code = 403


class NaoEncontradoError(PortalFrotaError):
    """Registro referenciado não existe"""
    status_code = 404


class ConflitoError(PortalFrotaError):
    """Violação de unicidade ou bloqueio referencial"""
    status_code = 409
