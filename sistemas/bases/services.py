# sistemas/bases/services.py
"""
Regras de negócio de bases: unicidade do nome e bloqueio de exclusão
enquanto houver guias apontando para a base.
"""

from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from sistemas.bases.models import Base, BaseAddress
from sistemas.bases.schemas import BaseCreate, BaseUpdate
from utils.exceptions import ConflitoError, NaoEncontradoError
from utils.logging_config import get_logger

logger = get_logger(__name__)


def listar_bases(db: Session) -> List[Base]:
    return (
        db.query(Base)
        .options(joinedload(Base.address))
        .order_by(Base.name)
        .all()
    )


def obter_base(db: Session, base_id: str) -> Base:
    base = db.query(Base).filter(Base.id == base_id).first()
    if not base:
        raise NaoEncontradoError("Base não encontrada")
    return base


def _verificar_nome_unico(db: Session, name: str, ignorar_id: Optional[str] = None):
    query = db.query(Base).filter(Base.name == name)
    if ignorar_id:
        query = query.filter(Base.id != ignorar_id)
    if query.first():
        raise ConflitoError(f"Já existe uma base com o nome '{name}'")


def criar_base(db: Session, dados: BaseCreate) -> Base:
    """Cria base e endereço na mesma transação."""
    _verificar_nome_unico(db, dados.name)

    base = Base(name=dados.name, phone=dados.phone)
    base.address = BaseAddress(**dados.address.model_dump())

    db.add(base)
    db.commit()
    db.refresh(base)

    logger.info("Base criada", base_id=base.id, name=base.name)
    return base


def atualizar_base(db: Session, base_id: str, dados: BaseUpdate) -> Base:
    """Atualização parcial da base e do endereço."""
    base = obter_base(db, base_id)
    update_data = dados.model_dump(exclude_unset=True, exclude={"address"})

    if "name" in update_data and update_data["name"] != base.name:
        _verificar_nome_unico(db, update_data["name"], ignorar_id=base.id)

    for field, value in update_data.items():
        setattr(base, field, value)

    if dados.address is not None:
        endereco = dados.address.model_dump(exclude_unset=True)
        if base.address is None:
            base.address = BaseAddress(**endereco)
        else:
            for field, value in endereco.items():
                setattr(base.address, field, value)

    db.commit()
    db.refresh(base)
    return base


def excluir_base(db: Session, base_id: str) -> str:
    """
    Exclui a base e devolve o nome. Bloqueado (409) se alguma guia
    referencia a base.
    """
    from sistemas.repair_orders.models import RepairOrder

    base = obter_base(db, base_id)

    relacionadas = db.query(RepairOrder).filter(RepairOrder.base_id == base.id).count()
    if relacionadas > 0:
        raise ConflitoError(
            f"Não foi possível excluir pois existem {relacionadas} "
            "ordens de reparo relacionadas a base"
        )

    nome = base.name
    db.delete(base)
    db.commit()

    logger.info("Base excluída", base_id=base_id, name=nome)
    return nome
