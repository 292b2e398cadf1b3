# sistemas/service_items/router.py
"""
Endpoints do catálogo de itens de serviço
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database.connection import get_db
from database.soft_delete import apenas_ativos
from sistemas.bases.services import obter_base
from sistemas.service_items.models import ServiceItem
from sistemas.service_items.schemas import (
    ServiceItemCreate, ServiceItemResponse, ServiceItemUpdate
)
from utils.exceptions import NaoEncontradoError
from utils.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/repair-order-service-items", tags=["Itens de Serviço"])


def obter_item(db: Session, item_id: str, incluir_excluidos: bool = False) -> ServiceItem:
    query = db.query(ServiceItem).filter(ServiceItem.id == item_id)
    if not incluir_excluidos:
        query = apenas_ativos(query, ServiceItem)
    item = query.first()
    if not item:
        raise NaoEncontradoError("Item não encontrado")
    return item


@router.get("", response_model=List[ServiceItemResponse])
async def listar_itens(
    base_id: Optional[str] = Query(None, alias="baseId"),
    db: Session = Depends(get_db)
):
    """Lista itens ativos, opcionalmente de uma base."""
    query = apenas_ativos(db.query(ServiceItem), ServiceItem)
    if base_id:
        query = query.filter(ServiceItem.base_id == base_id)
    return query.order_by(ServiceItem.name).all()


@router.post("", response_model=ServiceItemResponse, status_code=201)
async def criar_item(dados: ServiceItemCreate, db: Session = Depends(get_db)):
    if dados.base_id:
        obter_base(db, dados.base_id)

    item = ServiceItem(**dados.model_dump())
    db.add(item)
    db.commit()
    db.refresh(item)

    logger.info("Item de serviço criado", item_id=item.id, name=item.name)
    return item


@router.get("/{item_id}", response_model=ServiceItemResponse)
async def obter_item_endpoint(item_id: str, db: Session = Depends(get_db)):
    return obter_item(db, item_id)


@router.patch("/{item_id}", response_model=ServiceItemResponse)
async def atualizar_item(item_id: str, dados: ServiceItemUpdate, db: Session = Depends(get_db)):
    item = obter_item(db, item_id)
    update_data = dados.model_dump(exclude_unset=True)

    if update_data.get("base_id"):
        obter_base(db, update_data["base_id"])

    for field, value in update_data.items():
        setattr(item, field, value)

    db.commit()
    db.refresh(item)
    return item


@router.delete("/{item_id}")
async def excluir_item(item_id: str, db: Session = Depends(get_db)):
    """
    Exclusão lógica: o item some das listagens, mas os serviços já
    lançados com ele continuam apontando para o registro.
    """
    item = obter_item(db, item_id)
    item.excluir()
    db.commit()
    db.refresh(item)

    logger.info("Item de serviço excluído", item_id=item.id)
    return {
        "message": "Item deletado com sucesso",
        "data": ServiceItemResponse.model_validate(item).model_dump(by_alias=True, mode="json"),
    }
