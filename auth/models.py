# auth/models.py
"""
Modelo de usuário (mecânicos e orçamentistas)
"""

import enum
import uuid

from sqlalchemy import Column, String, Boolean, Date, DateTime, Text
from sqlalchemy.orm import relationship

from database.connection import Base
from utils.timezone import get_utc_now


class UserType(str, enum.Enum):
    """Perfil do usuário"""
    MECHANIC = "MECHANIC"
    BUDGETIST = "BUDGETIST"


class UserStatus(str, enum.Enum):
    """Situação do cadastro"""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REPROVED = "REPROVED"


def gerar_uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    """Usuário do sistema"""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=gerar_uuid)
    name = Column(String(200), nullable=False)
    cpf = Column(String(11), unique=True, index=True, nullable=False)
    email = Column(String(200), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    type = Column(String(20), nullable=False, default=UserType.MECHANIC.value)
    status = Column(String(20), nullable=False, default=UserStatus.PENDING.value, index=True)
    birth_date = Column(Date, nullable=True)
    assistant = Column(Boolean, nullable=False, default=False)
    observations = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=get_utc_now)
    updated_at = Column(DateTime(timezone=True), default=get_utc_now, onupdate=get_utc_now)

    repair_orders = relationship(
        "RepairOrder",
        secondary="repair_order_users",
        back_populates="users",
    )

    @property
    def is_approved(self) -> bool:
        return self.status == UserStatus.APPROVED.value

    @property
    def is_budgetist(self) -> bool:
        return self.type == UserType.BUDGETIST.value

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', type='{self.type}', status='{self.status}')>"
