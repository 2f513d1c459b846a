import json

from pydantic import BaseModel
from sqlalchemy import Column, Integer, ForeignKey, CheckConstraint, Text, String, DateTime, func

from models.base import Base
from models.pricing import PriceBreakdownDTO
from models.product import ProductDTO


class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    size = Column(String(10), nullable=True)
    # JSON-encoded sorted list of topping product ids
    topping_ids = Column(Text, nullable=False, default="[]")
    sugar_level = Column(String(10), nullable=False, default="50%")
    ice_level = Column(String(10), nullable=False, default="50%")
    quantity = Column(Integer, nullable=False, default=1)
    # JSON-encoded PriceBreakdownDTO computed when the line was added
    # NOTE: This is a display cache only. Checkout ALWAYS recomputes pricing
    # (services/order.py) because promotion windows may have ended meanwhile.
    price_breakdown = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        CheckConstraint('quantity > 0', name='check_quantity_positive'),
    )


class CartItemDTO(BaseModel):
    id: int | None = None
    user_id: int | None = None
    product_id: int | None = None
    size: str | None = None
    topping_ids: str | None = None
    sugar_level: str | None = None
    ice_level: str | None = None
    quantity: int | None = None
    price_breakdown: str | None = None

    def get_topping_ids(self) -> list[int]:
        if not self.topping_ids:
            return []
        return json.loads(self.topping_ids)


class CartLineSelectionDTO(BaseModel):
    """What the customer picked when adding a drink to the cart."""
    product_id: int
    size: str | None = None
    topping_ids: list[int] = []
    sugar_level: str = "50%"
    ice_level: str = "50%"
    quantity: int = 1


class CartLineDTO(BaseModel):
    """A cart item re-priced against the current clock."""
    cart_item_id: int
    product: ProductDTO
    size: str | None = None
    toppings: list[ProductDTO] = []
    sugar_level: str | None = None
    ice_level: str | None = None
    quantity: int
    breakdown: PriceBreakdownDTO

    @property
    def line_total(self) -> int:
        return self.breakdown.final_price * self.quantity


class CartSummaryDTO(BaseModel):
    lines: list[CartLineDTO] = []
    total_price: int = 0
