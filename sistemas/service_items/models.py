# sistemas/service_items/models.py
"""
Item de serviço do catálogo. Exclusão é lógica (deleted_at).
"""

from sqlalchemy import Column, String, DateTime, ForeignKey, Numeric
from sqlalchemy.orm import relationship

from auth.models import gerar_uuid
from database.connection import Base
from database.soft_delete import SoftDeleteMixin
from utils.timezone import get_utc_now


class ServiceItem(SoftDeleteMixin, Base):
    """Item que pode ser lançado como serviço numa guia"""

    __tablename__ = "repair_order_service_items"

    id = Column(String(36), primary_key=True, default=gerar_uuid)
    name = Column(String(200), nullable=False, index=True)
    value = Column(Numeric(12, 2), nullable=False, default=0)
    base_id = Column(String(36), ForeignKey("bases.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=get_utc_now)
    updated_at = Column(DateTime(timezone=True), default=get_utc_now, onupdate=get_utc_now)

    base = relationship("Base", passive_deletes=True)

    def __repr__(self):
        return f"<ServiceItem(id={self.id}, name='{self.name}', value={self.value})>"
