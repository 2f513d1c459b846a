from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, Float, String, Boolean, DateTime, func, CheckConstraint
from sqlalchemy import Enum as SQLEnum

from enums.discount_type import DiscountType
from enums.user_role import UserRole
from models.base import Base


class Voucher(Base):
    """
    Discount code applied at checkout.

    PERCENTAGE: discount_value percent off, only on applicable_category base prices if set
    FIXED_AMOUNT: discount_value off the order
    SPECIAL_DAY_FIXED_PRICE: matching lines are charged fixed_price per unit
    """
    __tablename__ = 'vouchers'

    id = Column(Integer, primary_key=True)
    code = Column(String, nullable=False, unique=True)
    description = Column(String, nullable=False)
    discount_type = Column(SQLEnum(DiscountType), nullable=False)
    discount_value = Column(Float, nullable=False, default=0.0)
    applicable_category = Column(String, nullable=True)

    # Special day fixed price conditions
    special_day = Column(Integer, nullable=True)  # 0=Sunday ... 6=Saturday
    applicable_size = Column(String(10), nullable=True)
    fixed_price = Column(Float, nullable=True)

    # Happy hour window [start_hour, end_hour)
    start_hour = Column(Integer, nullable=True)
    end_hour = Column(Integer, nullable=True)

    # Comma-separated UserRole values, empty means every role
    applicable_roles = Column(String, nullable=False,
                              default=",".join(role.value for role in UserRole))
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        CheckConstraint('special_day IS NULL OR (special_day >= 0 AND special_day <= 6)', name='check_special_day_range'),
        CheckConstraint('start_hour IS NULL OR (start_hour >= 0 AND start_hour <= 23)', name='check_start_hour_range'),
        CheckConstraint('end_hour IS NULL OR (end_hour >= 0 AND end_hour <= 24)', name='check_end_hour_range'),
    )


class VoucherDTO(BaseModel):
    id: int | None = None
    code: str | None = None
    description: str | None = None
    discount_type: DiscountType | None = None
    discount_value: float | None = None
    applicable_category: str | None = None
    special_day: int | None = None
    applicable_size: str | None = None
    fixed_price: float | None = None
    start_hour: int | None = None
    end_hour: int | None = None
    applicable_roles: str | None = None
    is_active: bool | None = None
    created_at: datetime | None = None

    def get_applicable_roles(self) -> list[UserRole]:
        if not self.applicable_roles:
            return []
        return [UserRole(role.strip()) for role in self.applicable_roles.split(",") if role.strip()]
