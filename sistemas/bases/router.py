# sistemas/bases/router.py
"""
Endpoints de bases
"""

from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from database.connection import get_db
from sistemas.bases import services
from sistemas.bases.schemas import BaseCreate, BaseResponse, BaseUpdate
from utils.audit import AuditEvent, log_audit_event

router = APIRouter(prefix="/bases", tags=["Bases"])


@router.get("", response_model=List[BaseResponse])
async def listar_bases(db: Session = Depends(get_db)):
    """Lista as bases com endereço."""
    return services.listar_bases(db)


@router.post("", response_model=BaseResponse, status_code=201)
async def criar_base(dados: BaseCreate, db: Session = Depends(get_db)):
    """Cria uma base com o endereço. Nome duplicado retorna 409."""
    return services.criar_base(db, dados)


@router.get("/{base_id}", response_model=BaseResponse)
async def obter_base(base_id: str, db: Session = Depends(get_db)):
    return services.obter_base(db, base_id)


@router.patch("/{base_id}", response_model=BaseResponse)
async def atualizar_base(base_id: str, dados: BaseUpdate, db: Session = Depends(get_db)):
    return services.atualizar_base(db, base_id, dados)


@router.delete("/{base_id}")
async def excluir_base(request: Request, base_id: str, db: Session = Depends(get_db)):
    """
    Exclui a base. Retorna 409 enquanto houver guias relacionadas.
    """
    nome = services.excluir_base(db, base_id)

    session = getattr(request.state, "session", None)
    log_audit_event(
        AuditEvent.BASE_DELETED,
        user_id=session.user_id if session else None,
        request=request,
        details={"base_id": base_id, "name": nome},
    )

    return {"message": "Base excluída com sucesso", "id": base_id}
