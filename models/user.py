from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, DateTime, String, Boolean, ForeignKey, func, CheckConstraint
from sqlalchemy import Enum as SQLEnum

from enums.lock_reason import LockReason
from enums.user_role import UserRole
from models.base import Base


class User(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.CUSTOMER)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    created_at = Column(DateTime, default=func.now())
    last_login = Column(DateTime, nullable=True)

    # Login Attempt Guard
    # is_locked + FAILED_LOGIN always comes with lock_until = locked_at + LOGIN_LOCK_HOURS,
    # ADMIN_ACTION / SECURITY locks have no lock_until and never expire on their own
    login_attempts = Column(Integer, nullable=False, default=0)
    is_locked = Column(Boolean, nullable=False, default=False, index=True)
    locked_reason = Column(SQLEnum(LockReason), nullable=True)
    lock_until = Column(DateTime, nullable=True)
    locked_at = Column(DateTime, nullable=True)
    locked_by_id = Column(Integer, ForeignKey('users.id', ondelete="SET NULL"), nullable=True)

    __table_args__ = (
        CheckConstraint('login_attempts >= 0', name='check_login_attempts_positive'),
    )


class UserDTO(BaseModel):
    id: int | None = None
    name: str | None = None
    email: str | None = None
    role: UserRole | None = None
    phone: str | None = None
    address: str | None = None
    created_at: datetime | None = None
    last_login: datetime | None = None

    login_attempts: int | None = None
    is_locked: bool | None = None
    locked_reason: LockReason | None = None
    lock_until: datetime | None = None
    locked_at: datetime | None = None
    locked_by_id: int | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class UserCredentialsDTO(UserDTO):
    """UserDTO including the password hash. Only used inside the authentication flow."""
    password_hash: str | None = None
