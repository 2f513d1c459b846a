from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey, String, func, CheckConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship

from enums.order_status import OrderStatus
from enums.payment_method import PaymentMethod
from enums.payment_status import PaymentStatus
from models.base import Base
from models.orderItem import OrderItemDTO


class Order(Base):
    __tablename__ = 'orders'

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    status = Column(SQLEnum(OrderStatus), nullable=False, default=OrderStatus.PENDING)
    payment_status = Column(SQLEnum(PaymentStatus), nullable=False, default=PaymentStatus.PENDING)
    payment_method = Column(SQLEnum(PaymentMethod), nullable=False)
    # Amount charged after voucher discount
    total_price = Column(Float, nullable=False)
    # Sum of re-priced lines before voucher discount
    original_price = Column(Float, nullable=True)
    voucher_code = Column(String, nullable=True)
    discount_amount = Column(Float, nullable=False, default=0.0)
    cash_amount = Column(Float, nullable=True)
    created_at = Column(DateTime, default=func.now())
    cancelled_at = Column(DateTime, nullable=True)

    items = relationship('OrderItem', back_populates='order', cascade='all, delete-orphan', lazy="selectin")

    __table_args__ = (
        CheckConstraint('total_price >= 0', name='check_order_total_price_non_negative'),
    )


class OrderDTO(BaseModel):
    id: int | None = None
    user_id: int | None = None
    status: OrderStatus | None = None
    payment_status: PaymentStatus | None = None
    payment_method: PaymentMethod | None = None
    total_price: float | None = None
    original_price: float | None = None
    voucher_code: str | None = None
    discount_amount: float | None = None
    cash_amount: float | None = None
    created_at: datetime | None = None
    cancelled_at: datetime | None = None
    items: list[OrderItemDTO] = []
