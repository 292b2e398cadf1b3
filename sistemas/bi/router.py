# sistemas/bi/router.py
"""
Endpoint do painel de BI
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from auth.dependencies import require_budgetist
from auth.models import User
from database.connection import get_db
from sistemas.bi.services import resumo

router = APIRouter(prefix="/bi", tags=["BI"])


@router.get("/summary")
async def resumo_bi(
    base_id: Optional[str] = Query(None, alias="baseId"),
    current_user: User = Depends(require_budgetist),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Indicadores do painel. Restrito a orçamentistas aprovados.

    Inclui:
    - Guias por status e por mês
    - Serviços por base e por categoria
    - Subtotal, descontos e total somados
    """
    return resumo(db, base_id=base_id)
