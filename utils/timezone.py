"""
POLÍTICA DE TIMEZONE DO PORTAL FROTA

REGRAS:
1. GRAVAÇÃO NO BANCO: Sempre UTC
2. EXIBIÇÃO (PDF, páginas): timezone local configurado (America/Sao_Paulo)
3. SERIALIZAÇÃO JSON: ISO 8601

USO:
    from utils.timezone import get_utc_now, to_local, format_local

    created_at = Column(DateTime(timezone=True), default=get_utc_now)
    texto = format_local(ordem.created_at)
"""

from datetime import datetime, timezone
from typing import Optional
import pytz

from config import TIMEZONE_LOCAL_NAME

TIMEZONE_LOCAL = pytz.timezone(TIMEZONE_LOCAL_NAME)

UTC = timezone.utc


def now_utc() -> datetime:
    """Datetime atual em UTC (timezone-aware)."""
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Normaliza um datetime para UTC aware.

    SQLite devolve datetimes naive mesmo em colunas timezone=True;
    datetimes naive são tratados como UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_local(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Converte um datetime para o timezone local.

    Se naive, assume que está em UTC.
    """
    if dt is None:
        return None
    return ensure_utc(dt).astimezone(TIMEZONE_LOCAL)


def format_local(dt: Optional[datetime], format: str = "%d/%m/%Y %H:%M") -> str:
    """
    Formata um datetime no timezone local para exibição.

    Returns:
        str: Data formatada (ou "-" se None)
    """
    if dt is None:
        return "-"
    return to_local(dt).strftime(format)


def get_utc_now():
    """
    Callable para uso em Column(default=...).

    USE EM MODELS:
        created_at = Column(DateTime(timezone=True), default=get_utc_now)
    """
    return now_utc()
