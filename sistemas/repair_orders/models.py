# sistemas/repair_orders/models.py
"""
Modelos da guia de remessa

- RepairOrder: cabeçalho (placa, km, base, status, desconto extra)
- RepairOrderService: serviço lançado na guia (exclusão lógica)
- repair_order_users: pessoal atribuído à guia (N:N com users)
"""

from sqlalchemy import (
    Column, String, Text, Integer, BigInteger, Numeric, DateTime,
    ForeignKey, Table, Index
)
from sqlalchemy.orm import relationship

from auth.models import gerar_uuid
from database.connection import Base
from database.soft_delete import SoftDeleteMixin
from sistemas.repair_orders.constants import RepairOrderStatus, ServiceStatus
from utils.timezone import get_utc_now


repair_order_users = Table(
    "repair_order_users",
    Base.metadata,
    Column("repair_order_id", String(36), ForeignKey("repair_orders.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class RepairOrder(Base):
    """Guia de remessa (GR)"""

    __tablename__ = "repair_orders"

    id = Column(String(36), primary_key=True, default=gerar_uuid)

    # Número externo GCAF
    gcaf = Column(BigInteger, unique=True, nullable=False, index=True)

    base_id = Column(String(36), ForeignKey("bases.id"), nullable=False, index=True)
    plate = Column(String(7), nullable=False, index=True)
    kilometers = Column(Integer, nullable=False, default=0)
    status = Column(String(30), nullable=False, default=RepairOrderStatus.PENDING.value, index=True)
    observations = Column(Text, nullable=True)

    # Desconto extra da guia, somado aos descontos dos serviços
    discount = Column(Numeric(12, 2), nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), default=get_utc_now, index=True)
    updated_at = Column(DateTime(timezone=True), default=get_utc_now, onupdate=get_utc_now)

    base = relationship("Base", back_populates="repair_orders")
    users = relationship("User", secondary=repair_order_users, back_populates="repair_orders")
    services = relationship(
        "RepairOrderService",
        back_populates="repair_order",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="RepairOrderService.created_at",
    )

    @property
    def servicos_ativos(self):
        return [s for s in self.services if not s.excluido]

    def __repr__(self):
        return f"<RepairOrder(id={self.id}, gcaf={self.gcaf}, plate='{self.plate}', status='{self.status}')>"


class RepairOrderService(SoftDeleteMixin, Base):
    """Serviço lançado numa guia"""

    __tablename__ = "repair_order_services"

    id = Column(String(36), primary_key=True, default=gerar_uuid)
    repair_order_id = Column(
        String(36), ForeignKey("repair_orders.id", ondelete="CASCADE"),
        nullable=False, index=True
    )
    item_id = Column(String(36), ForeignKey("repair_order_service_items.id"), nullable=False, index=True)

    quantity = Column(Integer, nullable=False, default=1)
    category = Column(String(20), nullable=False)
    type = Column(String(20), nullable=False)
    labor = Column(Text, nullable=False, default="")

    # Preço do serviço nesta guia (independente do valor de catálogo)
    value = Column(Numeric(12, 2), nullable=False, default=0)
    discount = Column(Numeric(12, 2), nullable=False, default=0)

    # Período trabalhado; duration = to - from em milissegundos
    duration_from = Column(DateTime(timezone=True), nullable=True)
    duration_to = Column(DateTime(timezone=True), nullable=True)
    duration = Column(BigInteger, nullable=False, default=0)

    status = Column(String(20), nullable=False, default=ServiceStatus.PENDING.value)

    # URL (/uploads/...) ou data URI base64
    photo = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=get_utc_now)
    updated_at = Column(DateTime(timezone=True), default=get_utc_now, onupdate=get_utc_now)

    repair_order = relationship("RepairOrder", back_populates="services")
    item = relationship("ServiceItem")

    __table_args__ = (
        Index("ix_repair_order_services_order_deleted", "repair_order_id", "deleted_at"),
    )

    def __repr__(self):
        return f"<RepairOrderService(id={self.id}, order={self.repair_order_id}, value={self.value})>"
