from pydantic import BaseModel
from sqlalchemy import Column, Integer, Float, ForeignKey, CheckConstraint, Index, String, Text, Boolean
from sqlalchemy.orm import relationship

from models.base import Base


class OrderItem(Base):
    __tablename__ = 'order_items'

    __table_args__ = (
        CheckConstraint('price >= 0', name='ck_order_item_non_negative_price'),
        CheckConstraint('quantity > 0', name='ck_order_item_positive_quantity'),
        Index('ix_order_items_order_id', 'order_id'),
    )

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False)
    product_id = Column(Integer, ForeignKey('products.id', ondelete='SET NULL'), nullable=True)
    # Snapshot so the order stays readable after catalog changes
    product_name = Column(String, nullable=False)
    size = Column(String(10), nullable=True)
    topping_ids = Column(Text, nullable=False, default="[]")
    sugar_level = Column(String(10), nullable=True)
    ice_level = Column(String(10), nullable=True)
    quantity = Column(Integer, nullable=False)

    # Checkout-time PriceBreakdown (per unit)
    original_base_price = Column(Float, nullable=False)
    final_base_price = Column(Float, nullable=False)
    topping_total = Column(Float, nullable=False, default=0.0)
    price = Column(Integer, nullable=False)
    is_discounted = Column(Boolean, nullable=False, default=False)

    order = relationship("Order", back_populates="items")


class OrderItemDTO(BaseModel):
    id: int | None = None
    order_id: int | None = None
    product_id: int | None = None
    product_name: str | None = None
    size: str | None = None
    topping_ids: str | None = None
    sugar_level: str | None = None
    ice_level: str | None = None
    quantity: int | None = None
    original_base_price: float | None = None
    final_base_price: float | None = None
    topping_total: float | None = None
    price: int | None = None
    is_discounted: bool | None = None
