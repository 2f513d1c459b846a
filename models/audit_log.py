from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Index, func
from sqlalchemy import Enum as SQLEnum

from enums.audit_action import AuditAction
from models.base import Base


class AuditLog(Base):
    __tablename__ = 'audit_logs'

    id = Column(Integer, primary_key=True)
    actor_id = Column(Integer, ForeignKey('users.id', ondelete="SET NULL"), nullable=True)
    action = Column(SQLEnum(AuditAction), nullable=False)
    resource_type = Column(String, nullable=False)
    resource_id = Column(Integer, nullable=True)
    status = Column(String, nullable=False, default="success")  # success | failure
    # JSON-encoded context (old/new values, reason)
    details = Column(Text, nullable=True)
    timestamp = Column(DateTime, nullable=False, default=func.now())

    __table_args__ = (
        Index('ix_audit_logs_timestamp', 'timestamp'),
    )


class AuditLogDTO(BaseModel):
    id: int | None = None
    actor_id: int | None = None
    action: AuditAction | None = None
    resource_type: str | None = None
    resource_id: int | None = None
    status: str | None = None
    details: str | None = None
    timestamp: datetime | None = None
