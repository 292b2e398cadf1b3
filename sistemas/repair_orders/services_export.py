# sistemas/repair_orders/services_export.py
"""
Exportação da guia em PDF (reportlab) e de várias guias num ZIP.

O PDF é um retrato somente leitura da guia: cabeçalho, pessoal atribuído,
serviços ativos com as fotos e os totais calculados por financeiro.py.
"""

import base64
import io
import zipfile
from typing import List, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.lib.utils import ImageReader
from reportlab.platypus import (
    Image, KeepTogether, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
)

from config import UPLOAD_FOLDER, UPLOAD_URL_PREFIX
from sistemas.repair_orders.constants import (
    CATEGORY_LABELS, SERVICE_STATUS_LABELS, STATUS_LABELS, TYPE_LABELS,
    RepairOrderStatus, ServiceCategory, ServiceStatus, ServiceType,
)
from sistemas.repair_orders.financeiro import calcular_totais, formatar_moeda, total_linha
from utils.logging_config import get_logger
from utils.timezone import format_local, now_utc

logger = get_logger(__name__)

FOTO_LARGURA_MAX = 8 * cm
FOTO_ALTURA_MAX = 6 * cm


def _rotulo(mapa: dict, enum_cls, valor: str) -> str:
    try:
        return mapa[enum_cls(valor)]
    except ValueError:
        return valor or "-"


def nome_arquivo_pdf(order) -> str:
    return f"guia-{order.gcaf}.pdf"


def _formatar_duracao(ms: Optional[int]) -> str:
    minutos = int(ms or 0) // 60000
    horas, minutos = divmod(minutos, 60)
    return f"{horas}h{minutos:02d}"


def _bytes_da_foto(photo: Optional[str]) -> Optional[bytes]:
    """Lê a foto do serviço (data URI ou arquivo em /uploads)."""
    if not photo:
        return None
    if photo.startswith("data:"):
        _, _, dados = photo.partition(",")
        return base64.b64decode(dados)
    if photo.startswith(UPLOAD_URL_PREFIX + "/"):
        pasta = UPLOAD_FOLDER.resolve()
        caminho = (pasta / photo[len(UPLOAD_URL_PREFIX) + 1:]).resolve()
        # Só lê arquivos dentro da pasta de uploads
        if caminho.is_relative_to(pasta) and caminho.is_file():
            return caminho.read_bytes()
    return None


def _imagem_servico(servico, estilo_nota):
    """Flowable da foto, ou um aviso quando ela não pode ser desenhada."""
    try:
        conteudo = _bytes_da_foto(servico.photo)
        if not conteudo:
            return Paragraph("Foto indisponível", estilo_nota)

        leitor = ImageReader(io.BytesIO(conteudo))
        largura, altura = leitor.getSize()
        escala = min(FOTO_LARGURA_MAX / largura, FOTO_ALTURA_MAX / altura, 1)
        return Image(io.BytesIO(conteudo), width=largura * escala, height=altura * escala)
    except Exception as e:
        logger.warning("Foto do serviço não pôde ser incluída no PDF", service_id=servico.id, erro=str(e))
        return Paragraph("Foto indisponível", estilo_nota)


def gerar_pdf_ordem(order, incluir_fotos: bool = True) -> bytes:
    """
    Gera o PDF da guia.

    Returns:
        Conteúdo do PDF em bytes
    """
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=A4,
        rightMargin=1.5 * cm, leftMargin=1.5 * cm,
        topMargin=1.5 * cm, bottomMargin=1.5 * cm,
        title=f"Guia de Remessa {order.gcaf}",
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'GuiaTitulo', parent=styles['Heading1'],
        fontSize=18, alignment=TA_CENTER, spaceAfter=4,
    )
    subtitle_style = ParagraphStyle(
        'GuiaSubtitulo', parent=styles['Heading2'],
        fontSize=13, alignment=TA_CENTER, spaceAfter=16,
    )
    heading_style = ParagraphStyle(
        'GuiaSecao', parent=styles['Heading2'],
        fontSize=12, spaceBefore=8, spaceAfter=8,
    )
    normal_style = styles['Normal']
    nota_style = ParagraphStyle('GuiaNota', parent=normal_style, fontSize=8, textColor=colors.grey)

    story = []

    story.append(Paragraph("GUIA DE REMESSA", title_style))
    story.append(Paragraph(f"GCAF nº {order.gcaf}", subtitle_style))

    # Cabeçalho
    info_data = [
        ['Placa:', order.plate, 'Quilometragem:', f"{order.kilometers:,}".replace(",", ".") + " km"],
        ['Base:', order.base.name if order.base else '-', 'Status:',
         _rotulo(STATUS_LABELS, RepairOrderStatus, order.status)],
        ['Criada em:', format_local(order.created_at), 'Atualizada em:', format_local(order.updated_at)],
    ]
    info_table = Table(info_data, colWidths=[3 * cm, 6 * cm, 3.5 * cm, 5.5 * cm])
    info_table.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('FONTNAME', (2, 0), (2, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 10),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 8),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.lightgrey),
    ]))
    story.append(info_table)

    if order.observations:
        story.append(Spacer(1, 8))
        story.append(Paragraph(f"<b>Observações:</b> {escape(order.observations)}", normal_style))

    # Pessoal
    story.append(Paragraph("Responsáveis", heading_style))
    if order.users:
        for user in order.users:
            story.append(Paragraph(f"{escape(user.name)} ({escape(user.email)})", normal_style))
    else:
        story.append(Paragraph("Nenhum responsável atribuído", nota_style))

    # Serviços
    servicos = [s for s in order.services if s.deleted_at is None]
    story.append(Paragraph("Serviços", heading_style))

    if servicos:
        servicos_data = [['Item', 'Categoria', 'Tipo', 'Qtd', 'Valor', 'Desconto', 'Total', 'Status']]
        for s in servicos:
            servicos_data.append([
                Paragraph(escape(s.item.name if s.item else '-'), normal_style),
                _rotulo(CATEGORY_LABELS, ServiceCategory, s.category),
                _rotulo(TYPE_LABELS, ServiceType, s.type),
                str(s.quantity),
                formatar_moeda(s.value),
                formatar_moeda(s.discount),
                formatar_moeda(total_linha(s)),
                _rotulo(SERVICE_STATUS_LABELS, ServiceStatus, s.status),
            ])

        servicos_table = Table(
            servicos_data,
            colWidths=[4 * cm, 2.2 * cm, 2 * cm, 1 * cm, 2.2 * cm, 2 * cm, 2.2 * cm, 2.2 * cm],
            repeatRows=1,
        )
        servicos_table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.lightgrey),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 8),
            ('ALIGN', (3, 1), (6, -1), 'RIGHT'),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ]))
        story.append(servicos_table)

        # Detalhes e fotos
        story.append(Paragraph("Detalhamento", heading_style))
        for indice, s in enumerate(servicos, start=1):
            bloco = [
                Paragraph(
                    f"<b>{indice}. {escape(s.item.name if s.item else '-')}</b> "
                    f"- duração {_formatar_duracao(s.duration)}",
                    normal_style,
                ),
            ]
            if s.labor:
                bloco.append(Paragraph(f"Mão de obra: {escape(s.labor)}", normal_style))
            if incluir_fotos:
                bloco.append(_imagem_servico(s, nota_style))
            bloco.append(Spacer(1, 10))
            story.append(KeepTogether(bloco))
    else:
        story.append(Paragraph("Nenhum serviço lançado", nota_style))

    # Totais
    totais = calcular_totais(order)
    story.append(Spacer(1, 12))
    totais_data = [
        ['Subtotal:', formatar_moeda(totais.subtotal)],
        ['Descontos dos serviços:', formatar_moeda(totais.desconto_servicos)],
        ['Desconto da guia:', formatar_moeda(totais.desconto_ordem)],
        ['TOTAL:', formatar_moeda(totais.total_exibicao)],
    ]
    totais_table = Table(totais_data, colWidths=[5 * cm, 4 * cm], hAlign='RIGHT')
    totais_table.setStyle(TableStyle([
        ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
        ('FONTSIZE', (0, 0), (-1, -1), 10),
        ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
        ('LINEABOVE', (0, -1), (-1, -1), 1, colors.black),
    ]))
    story.append(totais_table)
    story.append(Spacer(1, 16))
    story.append(Paragraph(f"Gerado em {format_local(now_utc())}", nota_style))

    doc.build(story)
    pdf = buffer.getvalue()
    buffer.close()

    logger.info("PDF da guia gerado", order_id=order.id, servicos=len(servicos), bytes=len(pdf))
    return pdf


def gerar_zip_ordens(orders: List) -> bytes:
    """Um PDF por guia, todos num ZIP."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for order in orders:
            zf.writestr(nome_arquivo_pdf(order), gerar_pdf_ordem(order))
    return buffer.getvalue()
