# sistemas/repair_orders/router.py
"""
Endpoints das guias de remessa e dos serviços

Rotas:
    /repair-orders              lista, criação multipart, exportação e exclusão em lote
    /repair-orders/{id}         detalhe, atualização parcial, exclusão
    /repair-orders/{id}/...     serviços, totais e PDF
    /repair-orders-base64       criação pelo app (JSON com fotos base64)
    /repair-order-services      serviços avulsos
"""

import json
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import Response
from pydantic import TypeAdapter
from sqlalchemy.orm import Session

from auth.dependencies import get_current_user
from auth.models import User
from database.connection import get_db
from sistemas.repair_orders import services
from sistemas.repair_orders.financeiro import calcular_totais
from sistemas.repair_orders.schemas import (
    DuracaoIn, IdsRequest, RepairOrderBase64Create, RepairOrderCreate,
    RepairOrderCriadaResponse, RepairOrderResponse, RepairOrderResumo,
    RepairOrderServiceResponse, RepairOrderUpdate, ServicoCreate, ServicoUpdate,
    TotaisResponse,
)
from sistemas.repair_orders.services import FotoRecebida
from sistemas.repair_orders.services_export import gerar_pdf_ordem, gerar_zip_ordens, nome_arquivo_pdf
from utils.audit import AuditEvent, log_audit_event
from utils.exceptions import ValidacaoError

router = APIRouter(prefix="/repair-orders", tags=["Guias de Remessa"])
router_base64 = APIRouter(prefix="/repair-orders-base64", tags=["Guias de Remessa"])
router_servicos = APIRouter(prefix="/repair-order-services", tags=["Serviços da Guia"])

_servicos_adapter = TypeAdapter(List[ServicoCreate])
_ids_adapter = TypeAdapter(List[str])


# ============================================
# Helpers
# ============================================

async def _ler_foto(upload: Optional[UploadFile]) -> Optional[FotoRecebida]:
    if upload is None:
        return None
    conteudo = await upload.read()
    if not conteudo:
        return None
    return FotoRecebida(
        filename=upload.filename or "",
        content_type=upload.content_type,
        conteudo=conteudo,
    )


def _campos_servico(**campos) -> dict:
    """
    Junta os campos de formulário de um serviço num dict para o schema.
    duration chega como JSON {"from": ..., "to": ...}.
    """
    dados = {k: v for k, v in campos.items() if v is not None}
    if "duration" in dados:
        try:
            dados["duration"] = json.loads(dados["duration"])
        except json.JSONDecodeError:
            raise ValidacaoError("Formato de duração inválido")
    return dados


def _usuario_da_sessao(request: Request) -> Optional[str]:
    session = getattr(request.state, "session", None)
    return session.user_id if session else None


# ============================================
# Guias
# ============================================

@router.get("", response_model=List[RepairOrderResumo])
async def listar_ordens(
    plate: Optional[str] = None,
    status: Optional[str] = None,
    base_id: Optional[str] = Query(None, alias="baseId"),
    db: Session = Depends(get_db)
):
    """
    Lista as guias. Filtros: trecho da placa, status e base.
    """
    return services.listar_ordens(db, plate=plate, status=status, base_id=base_id)


@router.post("", response_model=RepairOrderCriadaResponse, status_code=201)
async def criar_ordem(
    plate: str = Form(...),
    kilometers: str = Form(...),
    base: str = Form(...),
    services_json: str = Form("[]", alias="services"),
    gcaf: Optional[str] = Form(None),
    observations: Optional[str] = Form(None),
    user_ids: Optional[str] = Form(None, alias="userIds"),
    photos: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db)
):
    """
    Cria uma guia a partir do formulário multipart.

    - **services**: JSON com a lista de serviços
    - **photos**: uma foto por serviço, na mesma ordem
    - **userIds**: JSON com os ids do pessoal atribuído (opcional)
    """
    cabecalho = RepairOrderCreate.model_validate({
        "plate": plate,
        "kilometers": kilometers,
        "base_id": base,
        "gcaf": gcaf or None,
        "observations": observations,
        "user_ids": _ids_adapter.validate_json(user_ids) if user_ids else [],
    })
    servicos = _servicos_adapter.validate_json(services_json)
    fotos = [await _ler_foto(f) for f in (photos or [])]

    ordem = services.criar_ordem(db, cabecalho, servicos, fotos)

    return RepairOrderCriadaResponse(
        message="Ordem de reparo criada com sucesso", id=ordem.id, gcaf=ordem.gcaf
    )


@router_base64.post("", response_model=RepairOrderCriadaResponse, status_code=201)
async def criar_ordem_base64(
    dados: RepairOrderBase64Create,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Cria a guia enviada pelo app, com fotos em base64. Exige sessão.
    """
    ordem = services.criar_ordem_base64(db, dados, current_user)
    return RepairOrderCriadaResponse(
        message="Ordem de reparo criada com sucesso", id=ordem.id, gcaf=ordem.gcaf
    )


@router.post("/export")
async def exportar_ordens(dados: IdsRequest, db: Session = Depends(get_db)):
    """
    Exporta guias: um id gera o PDF, vários geram um ZIP com um PDF por guia.
    """
    ordens = [services.obter_ordem(db, order_id) for order_id in dict.fromkeys(dados.ids)]

    if len(ordens) == 1:
        return Response(
            content=gerar_pdf_ordem(ordens[0]),
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{nome_arquivo_pdf(ordens[0])}"'},
        )

    return Response(
        content=gerar_zip_ordens(ordens),
        media_type="application/zip",
        headers={"Content-Disposition": 'attachment; filename="guias.zip"'},
    )


@router.post("/bulk-delete")
async def excluir_em_lote(request: Request, dados: IdsRequest, db: Session = Depends(get_db)):
    """
    Exclui várias guias. Não para no primeiro erro; devolve o resultado
    agregado {total, sucesso, falhas, erros}.
    """
    resultado = services.excluir_em_lote(db, dados.ids)

    log_audit_event(
        AuditEvent.REPAIR_ORDER_DELETED,
        user_id=_usuario_da_sessao(request),
        request=request,
        details={"ids": dados.ids, "sucesso": resultado["sucesso"], "falhas": resultado["falhas"]},
        success=resultado["falhas"] == 0,
    )
    return resultado


@router.get("/{order_id}", response_model=RepairOrderResponse)
async def obter_ordem(order_id: str, db: Session = Depends(get_db)):
    """Guia com base, pessoal, serviços ativos e totais."""
    return services.obter_ordem(db, order_id)


@router.patch("/{order_id}", response_model=RepairOrderResponse)
async def atualizar_ordem(
    request: Request,
    order_id: str,
    dados: RepairOrderUpdate,
    db: Session = Depends(get_db)
):
    """
    Atualização parcial do cabeçalho e upsert dos serviços enviados.

    Serviço com id é atualizado; sem id é criado (foto obrigatória).
    Qualquer falha desfaz a atualização inteira.
    """
    ordem = services.atualizar_ordem(db, order_id, dados)

    if "status" in dados.model_fields_set:
        log_audit_event(
            AuditEvent.REPAIR_ORDER_STATUS_CHANGED,
            user_id=_usuario_da_sessao(request),
            request=request,
            details={"order_id": order_id, "status": ordem.status},
        )
    return ordem


@router.delete("/{order_id}")
async def excluir_ordem(request: Request, order_id: str, db: Session = Depends(get_db)):
    """Exclui a guia e os serviços dela."""
    services.excluir_ordem(db, order_id)

    log_audit_event(
        AuditEvent.REPAIR_ORDER_DELETED,
        user_id=_usuario_da_sessao(request),
        request=request,
        details={"ids": [order_id]},
    )
    return {"message": "Ordem de reparo excluída com sucesso", "id": order_id}


@router.post("/{order_id}/services", status_code=201)
async def adicionar_servico(
    order_id: str,
    quantity: Optional[str] = Form(None),
    item_id: Optional[str] = Form(None, alias="itemId"),
    category: Optional[str] = Form(None),
    type: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    labor: Optional[str] = Form(None),
    value: Optional[str] = Form(None),
    discount: Optional[str] = Form(None),
    duration: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Adiciona um serviço à guia (multipart, foto obrigatória). Exige sessão.
    """
    foto = await _ler_foto(photo)
    if foto is None:
        raise ValidacaoError("Foto é obrigatória")

    dados = ServicoCreate.model_validate(_campos_servico(
        quantity=quantity, item_id=item_id, category=category, type=type,
        status=status, labor=labor, value=value, discount=discount, duration=duration,
    ))
    servico = services.adicionar_servico(db, order_id, dados, foto)

    return {
        "error": False,
        "message": "Serviço adicionado com sucesso",
        "data": RepairOrderServiceResponse.model_validate(servico).model_dump(by_alias=True, mode="json"),
    }


@router.get("/{order_id}/totals", response_model=TotaisResponse)
async def totais_ordem(order_id: str, db: Session = Depends(get_db)):
    """Subtotal, descontos e total da guia."""
    return TotaisResponse.from_totais(calcular_totais(services.obter_ordem(db, order_id)))


@router.get("/{order_id}/pdf")
async def pdf_ordem(order_id: str, db: Session = Depends(get_db)):
    """PDF da guia para impressão."""
    ordem = services.obter_ordem(db, order_id)
    return Response(
        content=gerar_pdf_ordem(ordem),
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{nome_arquivo_pdf(ordem)}"'},
    )


# ============================================
# Serviços avulsos
# ============================================

@router_servicos.get("", response_model=List[RepairOrderServiceResponse])
async def listar_servicos(
    repair_order_id: Optional[str] = Query(None, alias="repairOrderId"),
    db: Session = Depends(get_db)
):
    """Serviços ativos, opcionalmente de uma guia."""
    return services.listar_servicos(db, repair_order_id)


@router_servicos.post("", response_model=RepairOrderServiceResponse, status_code=201)
async def criar_servico(
    repair_order_id: str = Form(..., alias="repairOrderId"),
    quantity: Optional[str] = Form(None),
    item_id: Optional[str] = Form(None, alias="itemId"),
    category: Optional[str] = Form(None),
    type: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    labor: Optional[str] = Form(None),
    value: Optional[str] = Form(None),
    discount: Optional[str] = Form(None),
    duration: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db)
):
    """Cria um serviço numa guia (multipart, foto obrigatória)."""
    foto = await _ler_foto(photo)
    if foto is None:
        raise ValidacaoError("Foto é obrigatória")

    dados = ServicoCreate.model_validate(_campos_servico(
        quantity=quantity, item_id=item_id, category=category, type=type,
        status=status, labor=labor, value=value, discount=discount, duration=duration,
    ))
    return services.adicionar_servico(db, repair_order_id, dados, foto)


@router_servicos.get("/{service_id}", response_model=RepairOrderServiceResponse)
async def obter_servico(service_id: str, db: Session = Depends(get_db)):
    """
    Detalhe do serviço. Devolve também serviços excluídos (com deletedAt
    preenchido), para consulta de histórico.
    """
    return services.obter_servico(db, service_id, incluir_excluidos=True)


@router_servicos.patch("/{service_id}", response_model=RepairOrderServiceResponse)
async def atualizar_servico(
    service_id: str,
    quantity: Optional[str] = Form(None),
    item_id: Optional[str] = Form(None, alias="itemId"),
    category: Optional[str] = Form(None),
    type: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    labor: Optional[str] = Form(None),
    value: Optional[str] = Form(None),
    discount: Optional[str] = Form(None),
    duration: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    photo_url: Optional[str] = Form(None, alias="photoUrl"),
    db: Session = Depends(get_db)
):
    """
    Atualização parcial (multipart). Sem foto nova, mantém a atual.
    """
    dados = ServicoUpdate.model_validate(_campos_servico(
        quantity=quantity, item_id=item_id, category=category, type=type,
        status=status, labor=labor, value=value, discount=discount, duration=duration,
    ))
    foto = await _ler_foto(photo)
    return services.atualizar_servico(db, service_id, dados, foto=foto, photo_url=photo_url)


@router_servicos.delete("/{service_id}")
async def excluir_servico(service_id: str, db: Session = Depends(get_db)):
    """Exclusão lógica: o serviço sai das listagens e dos totais."""
    servico = services.excluir_servico(db, service_id)
    return {
        "success": True,
        "message": "Serviço excluído com sucesso",
        "data": RepairOrderServiceResponse.model_validate(servico).model_dump(by_alias=True, mode="json"),
    }
