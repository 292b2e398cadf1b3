# users/router.py
"""
Endpoints de gestão de usuários (somente orçamentistas aprovados)
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from typing import List, Optional

from database.connection import get_db
from auth.models import User, UserStatus
from auth.router import verificar_unicidade_usuario
from auth.schemas import UserCreate, UserUpdate, UserResponse
from auth.security import get_password_hash
from auth.dependencies import require_budgetist
from utils.audit import AuditEvent, log_audit_event
from utils.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/users", tags=["Usuários"])


def _buscar_usuario(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Usuário não encontrado"
        )
    return user


@router.get("", response_model=List[UserResponse])
async def list_users(
    status_filtro: Optional[UserStatus] = None,
    skip: int = 0,
    limit: int = 100,
    admin: User = Depends(require_budgetist),
    db: Session = Depends(get_db)
):
    """
    Lista os usuários do sistema, opcionalmente filtrando por status.

    **Acesso:** Apenas orçamentistas aprovados
    """
    query = db.query(User)
    if status_filtro:
        query = query.filter(User.status == status_filtro.value)
    return query.order_by(User.name).offset(skip).limit(limit).all()


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: Request,
    user_data: UserCreate,
    admin: User = Depends(require_budgetist),
    db: Session = Depends(get_db)
):
    """
    Cria um novo usuário pelo dashboard.

    O status inicial é sempre PENDING, mesmo quando criado por um
    orçamentista. A aprovação é feita depois via PATCH.
    """
    verificar_unicidade_usuario(db, cpf=user_data.cpf, email=user_data.email)

    new_user = User(
        name=user_data.name,
        cpf=user_data.cpf,
        email=user_data.email,
        hashed_password=get_password_hash(user_data.password),
        type=user_data.type.value,
        status=UserStatus.PENDING.value,
        birth_date=user_data.birth_date,
        assistant=user_data.assistant,
        observations=user_data.observations,
    )

    db.add(new_user)
    db.commit()
    db.refresh(new_user)

    log_audit_event(
        AuditEvent.USER_CREATED,
        user_id=admin.id,
        request=request,
        details={"target_user_id": new_user.id, "email": new_user.email},
    )

    return new_user


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    admin: User = Depends(require_budgetist),
    db: Session = Depends(get_db)
):
    """
    Retorna detalhes de um usuário específico.
    """
    return _buscar_usuario(db, user_id)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    request: Request,
    user_id: str,
    user_data: UserUpdate,
    admin: User = Depends(require_budgetist),
    db: Session = Depends(get_db)
):
    """
    Atualização parcial de um usuário.

    Só os campos enviados são alterados. A troca de status (aprovação ou
    reprovação) exige um orçamentista aprovado diferente do próprio alvo.
    """
    user = _buscar_usuario(db, user_id)
    update_data = user_data.model_dump(exclude_unset=True)

    if "status" in update_data and user.id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Você não pode alterar o status do seu próprio cadastro"
        )

    verificar_unicidade_usuario(
        db,
        cpf=update_data.get("cpf"),
        email=update_data.get("email"),
        ignorar_id=user.id,
    )

    status_anterior = user.status

    password = update_data.pop("password", None)
    if password:
        user.hashed_password = get_password_hash(password)

    for field, value in update_data.items():
        if field in ("type", "status") and value is not None:
            value = value.value
        setattr(user, field, value)

    db.commit()
    db.refresh(user)

    if user.status != status_anterior:
        logger.info(
            "Status de usuário alterado",
            user_id=user.id,
            de=status_anterior,
            para=user.status,
        )
        log_audit_event(
            AuditEvent.USER_STATUS_CHANGED,
            user_id=admin.id,
            request=request,
            details={"target_user_id": user.id, "status": user.status},
        )
    else:
        log_audit_event(
            AuditEvent.USER_UPDATED,
            user_id=admin.id,
            request=request,
            details={"target_user_id": user.id, "fields": sorted(update_data)},
        )

    return user


@router.delete("/{user_id}")
async def delete_user(
    request: Request,
    user_id: str,
    admin: User = Depends(require_budgetist),
    db: Session = Depends(get_db)
):
    """
    Remove um usuário. As atribuições dele em guias são desfeitas.
    """
    user = _buscar_usuario(db, user_id)

    if user.id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Você não pode excluir sua própria conta"
        )

    user.repair_orders = []
    db.delete(user)
    db.commit()

    log_audit_event(
        AuditEvent.USER_DELETED,
        user_id=admin.id,
        request=request,
        details={"target_user_id": user_id},
    )

    return {"message": "Usuário excluído com sucesso"}
