from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, func
from sqlalchemy import Enum as SQLEnum

from enums.login_status import LoginStatus
from models.base import Base


class LoginLog(Base):
    __tablename__ = 'login_logs'

    id = Column(Integer, primary_key=True)
    # NULL when the submitted email is not registered
    user_id = Column(Integer, ForeignKey('users.id', ondelete="SET NULL"), nullable=True)
    username = Column(String, nullable=False)
    ip_address = Column(String, nullable=False)
    user_agent = Column(String, nullable=False, default="")
    login_status = Column(SQLEnum(LoginStatus), nullable=False)
    failure_reason = Column(String, nullable=True)
    login_time = Column(DateTime, nullable=False, default=func.now())

    __table_args__ = (
        Index('ix_login_logs_user_time', 'user_id', 'login_time'),
        Index('ix_login_logs_login_time', 'login_time'),
    )


class LoginLogDTO(BaseModel):
    id: int | None = None
    user_id: int | None = None
    username: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    login_status: LoginStatus | None = None
    failure_reason: str | None = None
    login_time: datetime | None = None
