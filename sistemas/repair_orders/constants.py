# sistemas/repair_orders/constants.py
"""
Enumerações das guias e dos serviços
"""

import enum


class RepairOrderStatus(str, enum.Enum):
    """Status da guia. Qualquer valor pode ser atribuído a partir de qualquer outro."""
    PENDING = "PENDING"
    REVISION = "REVISION"
    APPROVED = "APPROVED"
    PARTIALLY_APPROVED = "PARTIALLY_APPROVED"
    INVOICE_APPROVED = "INVOICE_APPROVED"
    CANCELLED = "CANCELLED"


class ServiceStatus(str, enum.Enum):
    """Status do serviço, independente do status da guia"""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    CANCELLED = "CANCELLED"


class ServiceCategory(str, enum.Enum):
    LABOR = "LABOR"
    MATERIAL = "MATERIAL"


class ServiceType(str, enum.Enum):
    PREVENTIVE = "PREVENTIVE"
    CORRECTIVE = "CORRECTIVE"
    HELP = "HELP"


# Rótulos usados no PDF e no BI
STATUS_LABELS = {
    RepairOrderStatus.PENDING: "Pendente",
    RepairOrderStatus.REVISION: "Em revisão",
    RepairOrderStatus.APPROVED: "Aprovada",
    RepairOrderStatus.PARTIALLY_APPROVED: "Parcialmente aprovada",
    RepairOrderStatus.INVOICE_APPROVED: "Nota fiscal aprovada",
    RepairOrderStatus.CANCELLED: "Cancelada",
}

SERVICE_STATUS_LABELS = {
    ServiceStatus.PENDING: "Pendente",
    ServiceStatus.APPROVED: "Aprovado",
    ServiceStatus.CANCELLED: "Cancelado",
}

CATEGORY_LABELS = {
    ServiceCategory.LABOR: "Mão de obra",
    ServiceCategory.MATERIAL: "Material",
}

TYPE_LABELS = {
    ServiceType.PREVENTIVE: "Preventivo",
    ServiceType.CORRECTIVE: "Corretivo",
    ServiceType.HELP: "Ajuda",
}

PLATE_MAX_LENGTH = 7
