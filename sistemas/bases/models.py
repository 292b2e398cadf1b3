# sistemas/bases/models.py
"""
Modelos de bases e endereço (endereço pertence à base e sai junto com ela)
"""

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from auth.models import gerar_uuid
from database.connection import Base as ModelBase
from utils.timezone import get_utc_now


class Base(ModelBase):
    """Base operacional à qual guias e itens de serviço pertencem"""

    __tablename__ = "bases"

    id = Column(String(36), primary_key=True, default=gerar_uuid)
    name = Column(String(200), unique=True, nullable=False, index=True)
    phone = Column(String(30), nullable=True)
    created_at = Column(DateTime(timezone=True), default=get_utc_now)
    updated_at = Column(DateTime(timezone=True), default=get_utc_now, onupdate=get_utc_now)

    address = relationship(
        "BaseAddress",
        back_populates="base",
        uselist=False,
        cascade="all, delete-orphan",
    )
    repair_orders = relationship("RepairOrder", back_populates="base")

    def __repr__(self):
        return f"<Base(id={self.id}, name='{self.name}')>"


class BaseAddress(ModelBase):
    """Endereço da base"""

    __tablename__ = "base_addresses"

    id = Column(String(36), primary_key=True, default=gerar_uuid)
    base_id = Column(
        String(36), ForeignKey("bases.id", ondelete="CASCADE"),
        unique=True, nullable=False
    )
    street = Column(String(200), nullable=False)
    number = Column(String(20), nullable=False)
    complement = Column(String(200), nullable=True)
    neighborhood = Column(String(100), nullable=False)
    city = Column(String(100), nullable=False)
    state = Column(String(2), nullable=False)
    zip_code = Column(String(8), nullable=False)

    base = relationship("Base", back_populates="address")
