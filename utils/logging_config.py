# utils/logging_config.py
"""
Logging estruturado do Portal Frota (structlog sobre o logging padrão).

- Produção: uma linha JSON por evento
- Desenvolvimento: console colorido
- Todo evento recebe request_id (quando houver requisição) e service
- CPF nunca sai inteiro nos logs

USO:
    from utils.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("Guia criada", order_id=ordem.id, plate=ordem.plate)
"""

import logging
import re
import sys
from functools import lru_cache

import structlog

from config import IS_PRODUCTION, LOG_LEVEL, SERVICE_NAME

_CPF_RE = re.compile(r"^\d{3}\.?\d{3}\.?\d{3}-?(\d{2})$")

# Bibliotecas que poluem o log em DEBUG
LOGGERS_SILENCIADOS = ("uvicorn.access", "sqlalchemy.engine", "multipart", "PIL", "reportlab")


def add_request_id(logger, method_name: str, event_dict: dict) -> dict:
    """Inclui o request_id da requisição corrente (ContextVar do middleware)."""
    from middleware.request_id import get_request_id

    request_id = get_request_id()
    if request_id:
        event_dict.setdefault("request_id", request_id)
    return event_dict


def add_service_info(logger, method_name: str, event_dict: dict) -> dict:
    event_dict["service"] = SERVICE_NAME
    return event_dict


def mascarar_cpf(logger, method_name: str, event_dict: dict) -> dict:
    """Troca o valor de chaves cpf por ***.***.***-DV."""
    for chave, valor in event_dict.items():
        if "cpf" in chave.lower() and isinstance(valor, str):
            match = _CPF_RE.match(valor)
            event_dict[chave] = f"***.***.***-{match.group(1)}" if match else "***"
    return event_dict


def _processadores_comuns() -> list:
    return [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_request_id,
        add_service_info,
        mascarar_cpf,
    ]


def configure_structlog():
    if IS_PRODUCTION:
        renderer = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    else:
        renderer = [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]

    structlog.configure(
        processors=[structlog.stdlib.PositionalArgumentsFormatter()] + _processadores_comuns() + renderer,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_stdlib_logging():
    """
    Handler único no root logger. Em produção, logs de bibliotecas
    (uvicorn, sqlalchemy) também saem em JSON.
    """
    nivel = getattr(logging, LOG_LEVEL, logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    if IS_PRODUCTION:
        handler.setFormatter(structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(ensure_ascii=False),
            foreign_pre_chain=_processadores_comuns(),
        ))
    else:
        handler.setFormatter(logging.Formatter(
            "[%(asctime)s] %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))

    root_logger = logging.getLogger()
    root_logger.setLevel(nivel)
    root_logger.handlers = [handler]

    for nome in LOGGERS_SILENCIADOS:
        logging.getLogger(nome).setLevel(logging.WARNING)


def setup_logging():
    """Chamada no lifespan da aplicação (main.py)."""
    configure_stdlib_logging()
    configure_structlog()


@lru_cache(maxsize=128)
def get_logger(name: str):
    return structlog.get_logger(name)


configure_structlog()


__all__ = [
    "setup_logging",
    "get_logger",
    "mascarar_cpf",
]
