# sistemas/repair_orders/services.py
"""
Regras de negócio das guias de remessa.

Escritas com mais de um passo (cabeçalho + serviços, atualização com
upsert de serviços) acontecem numa única transação: ou tudo é gravado ou
nada é. A exclusão em lote é a exceção: cada id é tratado isoladamente e
o resultado agregado é devolvido, sem desfazer as exclusões que deram certo.
"""

import base64
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload
from werkzeug.utils import secure_filename

from auth.models import User
from config import ALLOWED_PHOTO_TYPES, MAX_PHOTO_SIZE, UPLOAD_FOLDER, UPLOAD_URL_PREFIX
from database.soft_delete import apenas_ativos
from sistemas.bases.services import obter_base
from sistemas.repair_orders import lifecycle
from sistemas.repair_orders.models import RepairOrder, RepairOrderService
from sistemas.repair_orders.schemas import (
    RepairOrderBase64Create, RepairOrderCreate, RepairOrderUpdate,
    ServicoCreate, ServicoUpdate, ServicoUpsert, validar_referencia_foto,
)
from sistemas.service_items.models import ServiceItem
from utils.exceptions import ConflitoError, NaoEncontradoError, PortalFrotaError, ValidacaoError
from utils.logging_config import get_logger

logger = get_logger(__name__)

# Campos do cabeçalho que aceitam null explícito
CAMPOS_ANULAVEIS = {"observations"}


# ============================================
# Fotos
# ============================================

@dataclass
class FotoRecebida:
    """Arquivo de foto já lido da requisição multipart"""
    filename: str
    content_type: Optional[str]
    conteudo: bytes


def validar_foto(foto: Optional[FotoRecebida]) -> FotoRecebida:
    """Foto é obrigatória, precisa ser imagem e respeitar MAX_PHOTO_SIZE."""
    if foto is None or not foto.conteudo:
        raise ValidacaoError("Foto é obrigatória")

    if foto.content_type and foto.content_type not in ALLOWED_PHOTO_TYPES:
        raise ValidacaoError(
            "Tipo de foto não permitido",
            details={"contentType": foto.content_type, "permitidos": sorted(ALLOWED_PHOTO_TYPES)},
        )

    if len(foto.conteudo) > MAX_PHOTO_SIZE:
        raise ValidacaoError(
            f"Foto excede o tamanho máximo de {MAX_PHOTO_SIZE // (1024 * 1024)}MB"
        )
    return foto


def foto_para_data_uri(foto: FotoRecebida) -> str:
    """Converte a foto em data URI (forma usada pelos serviços)."""
    validar_foto(foto)
    mime = foto.content_type or "image/jpeg"
    return f"data:{mime};base64,{base64.b64encode(foto.conteudo).decode('utf-8')}"


def salvar_foto_upload(foto: FotoRecebida, pasta: Optional[Path] = None) -> str:
    """
    Grava a foto em UPLOAD_FOLDER e devolve a URL pública (/uploads/...).
    """
    validar_foto(foto)
    pasta = Path(pasta or UPLOAD_FOLDER)
    pasta.mkdir(parents=True, exist_ok=True)

    nome = secure_filename(foto.filename or "") or "foto.jpg"
    nome = f"{int(time.time() * 1000)}-{nome}"
    with open(pasta / nome, "wb") as f:
        f.write(foto.conteudo)

    return f"{UPLOAD_URL_PREFIX}/{nome}"


def _remover_uploads(urls: Iterable[str], pasta: Optional[Path] = None):
    """Remove arquivos gravados por uma transação que falhou."""
    pasta = Path(pasta or UPLOAD_FOLDER)
    for url in urls:
        if url and url.startswith(UPLOAD_URL_PREFIX + "/"):
            (pasta / url[len(UPLOAD_URL_PREFIX) + 1:]).unlink(missing_ok=True)


# ============================================
# Consultas
# ============================================

def _query_ordens(db: Session):
    return db.query(RepairOrder).options(
        joinedload(RepairOrder.base),
        selectinload(RepairOrder.users),
        selectinload(RepairOrder.services).joinedload(RepairOrderService.item),
    )


def obter_ordem(db: Session, order_id: str) -> RepairOrder:
    ordem = _query_ordens(db).filter(RepairOrder.id == order_id).first()
    if not ordem:
        raise NaoEncontradoError("Ordem de reparo não encontrada")
    return ordem


def listar_ordens(
    db: Session,
    plate: Optional[str] = None,
    status: Optional[str] = None,
    base_id: Optional[str] = None,
) -> List[RepairOrder]:
    """
    Lista guias, mais recentes primeiro.

    plate filtra por trecho da placa, sem diferenciar maiúsculas.
    """
    query = _query_ordens(db)

    if plate:
        termo = plate.replace("-", "").strip()
        query = query.filter(RepairOrder.plate.ilike(f"%{termo}%"))
    if status:
        query = query.filter(RepairOrder.status == lifecycle.parse_status(status).value)
    if base_id:
        query = query.filter(RepairOrder.base_id == base_id)

    return query.order_by(RepairOrder.created_at.desc()).all()


def gerar_gcaf(db: Session) -> int:
    """GCAF a partir do instante atual em milissegundos (único)."""
    gcaf = int(time.time() * 1000)
    while db.query(RepairOrder.id).filter(RepairOrder.gcaf == gcaf).first():
        gcaf += 1
    return gcaf


def verificar_gcaf_unico(db: Session, gcaf: int, ignorar_id: Optional[str] = None):
    query = db.query(RepairOrder.id).filter(RepairOrder.gcaf == gcaf)
    if ignorar_id:
        query = query.filter(RepairOrder.id != ignorar_id)
    if query.first():
        raise ConflitoError(f"Já existe uma ordem de reparo com o GCAF {gcaf}")


def _carregar_usuarios(db: Session, user_ids: Iterable[str]) -> List[User]:
    ids = list(dict.fromkeys(i for i in user_ids if i))
    if not ids:
        return []
    usuarios = db.query(User).filter(User.id.in_(ids)).all()
    encontrados = {u.id for u in usuarios}
    faltando = [i for i in ids if i not in encontrados]
    if faltando:
        raise NaoEncontradoError("Usuário não encontrado", details={"ids": faltando})
    return usuarios


def _obter_item(db: Session, item_id: str) -> ServiceItem:
    item = apenas_ativos(db.query(ServiceItem), ServiceItem).filter(ServiceItem.id == item_id).first()
    if not item:
        raise NaoEncontradoError("Item não encontrado", details={"itemId": item_id})
    return item


def _erros_validacao(e: ValidationError) -> list:
    return e.errors(include_url=False, include_context=False)


# ============================================
# Serviços
# ============================================

def novo_servico(db: Session, dados: ServicoCreate, photo: Optional[str]) -> RepairOrderService:
    """
    Monta um serviço (sem gravar). Sem valor informado, usa o valor de
    catálogo do item.
    """
    if not photo:
        raise ValidacaoError("Foto é obrigatória")

    item = _obter_item(db, dados.item_id)

    return RepairOrderService(
        item_id=item.id,
        quantity=dados.quantity,
        category=dados.category.value,
        type=dados.type.value,
        labor=dados.labor or "",
        value=dados.value if dados.value is not None else item.value,
        discount=dados.discount,
        status=dados.status.value,
        duration_from=dados.duration.from_,
        duration_to=dados.duration.to,
        duration=dados.duration.milissegundos,
        photo=photo,
    )


def _aplicar_campos_servico(db: Session, servico: RepairOrderService, campos: Dict):
    """Atualização parcial de um serviço existente."""
    if campos.get("item_id"):
        servico.item_id = _obter_item(db, campos["item_id"]).id

    for campo in ("quantity", "labor", "value", "discount", "photo"):
        if campos.get(campo) is not None:
            setattr(servico, campo, campos[campo])

    for campo in ("category", "type", "status"):
        if campos.get(campo) is not None:
            setattr(servico, campo, campos[campo].value)

    duracao = campos.get("duration")
    if duracao is not None:
        servico.duration_from = duracao.from_
        servico.duration_to = duracao.to
        servico.duration = duracao.milissegundos


def _upsert_servicos(db: Session, ordem: RepairOrder, servicos: List[ServicoUpsert]):
    existentes = {s.id: s for s in ordem.services if not s.excluido}

    for entrada in servicos:
        if entrada.id:
            servico = existentes.get(entrada.id)
            if servico is None:
                raise NaoEncontradoError(
                    "Serviço não encontrado nesta ordem de reparo",
                    details={"id": entrada.id},
                )
            campos = {k: getattr(entrada, k) for k in entrada.model_fields_set if k != "id"}
            _aplicar_campos_servico(db, servico, campos)
            continue

        try:
            dados = ServicoCreate.model_validate(
                entrada.model_dump(exclude_unset=True, exclude={"id"})
            )
        except ValidationError as e:
            raise ValidacaoError("Dados inválidos", details=_erros_validacao(e))

        ordem.services.append(novo_servico(db, dados, entrada.photo))


# ============================================
# Guias
# ============================================

def criar_ordem(
    db: Session,
    cabecalho: RepairOrderCreate,
    servicos: List[ServicoCreate],
    fotos: List[Optional[FotoRecebida]],
) -> RepairOrder:
    """
    Cria a guia com os serviços do formulário multipart.

    A foto de cada serviço vem do arquivo de mesma posição em `fotos`
    (ou do campo photo do próprio serviço).
    """
    obter_base(db, cabecalho.base_id)

    if cabecalho.gcaf is not None:
        verificar_gcaf_unico(db, cabecalho.gcaf)

    usuarios = _carregar_usuarios(db, cabecalho.user_ids)

    gravadas: List[str] = []
    try:
        ordem = RepairOrder(
            gcaf=cabecalho.gcaf or gerar_gcaf(db),
            base_id=cabecalho.base_id,
            plate=cabecalho.plate,
            kilometers=cabecalho.kilometers,
            observations=cabecalho.observations,
            discount=cabecalho.discount,
        )
        ordem.users = usuarios

        for indice, dados in enumerate(servicos):
            foto = fotos[indice] if indice < len(fotos) else None
            if foto is not None:
                url = salvar_foto_upload(foto)
                gravadas.append(url)
            else:
                url = dados.photo
            ordem.services.append(novo_servico(db, dados, url))

        db.add(ordem)
        db.commit()
    except Exception:
        db.rollback()
        _remover_uploads(gravadas)
        raise

    logger.info(
        "Ordem de reparo criada",
        order_id=ordem.id,
        gcaf=ordem.gcaf,
        plate=ordem.plate,
        servicos=len(servicos),
    )
    return ordem


def criar_ordem_base64(
    db: Session,
    dados: RepairOrderBase64Create,
    sessao_user: User,
) -> RepairOrder:
    """
    Cria a guia enviada pelo app (JSON com fotos em base64).

    O responsável é o userId informado ou, na falta dele, o usuário da
    sessão; o assistente é opcional.
    """
    obter_base(db, dados.base_id)

    if dados.gcaf is not None:
        verificar_gcaf_unico(db, dados.gcaf)

    usuarios = _carregar_usuarios(db, [dados.user_id or sessao_user.id, dados.assistant_id])

    try:
        ordem = RepairOrder(
            gcaf=dados.gcaf or gerar_gcaf(db),
            base_id=dados.base_id,
            plate=dados.plate,
            kilometers=dados.kilometers,
            observations=dados.observations,
            discount=0,
        )
        ordem.users = usuarios

        for servico in dados.services:
            ordem.services.append(novo_servico(db, servico, servico.photo))

        db.add(ordem)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "Ordem de reparo criada pelo app",
        order_id=ordem.id,
        user_id=sessao_user.id,
        servicos=len(dados.services),
    )
    return ordem


def atualizar_ordem(db: Session, order_id: str, dados: RepairOrderUpdate) -> RepairOrder:
    """
    Atualização parcial do cabeçalho com upsert dos serviços enviados.

    Tudo numa transação: se um serviço falhar, o cabeçalho também volta.
    """
    ordem = obter_ordem(db, order_id)

    # Status inválido (inclusive null) falha antes de qualquer consulta
    if "status" in dados.model_fields_set:
        lifecycle.parse_status(dados.status)

    payload = dados.model_dump(exclude_unset=True, exclude={"services", "user_ids"})
    payload = {
        k: v for k, v in payload.items()
        if v is not None or k in CAMPOS_ANULAVEIS
    }

    if "base_id" in payload:
        obter_base(db, payload["base_id"])
    if "gcaf" in payload:
        verificar_gcaf_unico(db, payload["gcaf"], ignorar_id=ordem.id)

    try:
        lifecycle.aplicar_atualizacao(ordem, payload)

        if dados.user_ids is not None:
            ordem.users = _carregar_usuarios(db, dados.user_ids)

        if dados.services:
            _upsert_servicos(db, ordem, dados.services)

        db.commit()
    except Exception:
        db.rollback()
        raise

    return obter_ordem(db, order_id)


def excluir_ordem(db: Session, order_id: str) -> RepairOrder:
    """Exclui a guia e, em cascata, os serviços dela."""
    ordem = obter_ordem(db, order_id)
    db.delete(ordem)
    db.commit()

    logger.info("Ordem de reparo excluída", order_id=order_id)
    return ordem


def excluir_em_lote(db: Session, ids: List[str]) -> Dict:
    """
    Exclui várias guias sem parar no primeiro erro.

    Cada id é excluído e confirmado isoladamente; as falhas são reunidas
    no resultado e as exclusões bem-sucedidas permanecem.
    """
    resultado = {"total": len(ids), "sucesso": 0, "falhas": 0, "erros": []}

    for order_id in ids:
        try:
            ordem = db.query(RepairOrder).filter(RepairOrder.id == order_id).first()
            if not ordem:
                raise NaoEncontradoError("Ordem de reparo não encontrada")
            db.delete(ordem)
            db.commit()
            resultado["sucesso"] += 1
        except (PortalFrotaError, SQLAlchemyError) as e:
            db.rollback()
            resultado["falhas"] += 1
            resultado["erros"].append({
                "id": order_id,
                "message": getattr(e, "message", None) or str(e),
            })
            logger.warning("Falha ao excluir ordem de reparo", order_id=order_id, erro=str(e))

    return resultado


# ============================================
# Serviços avulsos
# ============================================

def obter_servico(db: Session, service_id: str, incluir_excluidos: bool = False) -> RepairOrderService:
    query = db.query(RepairOrderService).options(joinedload(RepairOrderService.item))
    query = query.filter(RepairOrderService.id == service_id)
    if not incluir_excluidos:
        query = apenas_ativos(query, RepairOrderService)
    servico = query.first()
    if not servico:
        raise NaoEncontradoError("Serviço não encontrado")
    return servico


def listar_servicos(db: Session, repair_order_id: Optional[str] = None) -> List[RepairOrderService]:
    """Serviços ativos, mais recentes primeiro."""
    query = apenas_ativos(
        db.query(RepairOrderService).options(joinedload(RepairOrderService.item)),
        RepairOrderService,
    )
    if repair_order_id:
        query = query.filter(RepairOrderService.repair_order_id == repair_order_id)
    return query.order_by(RepairOrderService.created_at.desc()).all()


def adicionar_servico(
    db: Session,
    order_id: str,
    dados: ServicoCreate,
    foto: Optional[FotoRecebida],
) -> RepairOrderService:
    """Adiciona um serviço a uma guia existente (foto obrigatória, em data URI)."""
    ordem = db.query(RepairOrder).filter(RepairOrder.id == order_id).first()
    if not ordem:
        raise NaoEncontradoError("Ordem de reparo não encontrada")

    servico = novo_servico(db, dados, foto_para_data_uri(foto))
    servico.repair_order_id = ordem.id

    db.add(servico)
    db.commit()
    db.refresh(servico)

    logger.info("Serviço adicionado", order_id=ordem.id, service_id=servico.id)
    return servico


def atualizar_servico(
    db: Session,
    service_id: str,
    dados: ServicoUpdate,
    foto: Optional[FotoRecebida] = None,
    photo_url: Optional[str] = None,
) -> RepairOrderService:
    """
    PATCH de serviço. Foto nova substitui a atual; sem foto nova, vale a
    photoUrl enviada ou a foto já gravada.
    """
    servico = obter_servico(db, service_id)

    campos = {k: getattr(dados, k) for k in dados.model_fields_set}
    if foto is not None and foto.conteudo:
        campos["photo"] = foto_para_data_uri(foto)
    elif photo_url:
        try:
            campos["photo"] = validar_referencia_foto(photo_url)
        except ValueError as e:
            raise ValidacaoError(str(e), details=[{"loc": ["photoUrl"], "msg": str(e)}])
    elif not servico.photo:
        raise ValidacaoError("Foto é obrigatória")

    _aplicar_campos_servico(db, servico, campos)
    db.commit()
    db.refresh(servico)
    return servico


def excluir_servico(db: Session, service_id: str) -> RepairOrderService:
    """Exclusão lógica do serviço."""
    servico = obter_servico(db, service_id)
    servico.excluir()
    db.commit()
    db.refresh(servico)

    logger.info("Serviço excluído", service_id=service_id, order_id=servico.repair_order_id)
    return servico
