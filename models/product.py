from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey, CheckConstraint, func
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import relationship

from enums.product_category import ProductCategory
from models.base import Base


class Product(Base):
    """
    A drink or a topping.

    Toppings carry a flat `price`. Every other category is priced by size
    through the ordered `sizes` list (first entry is the default size).
    """
    __tablename__ = 'products'

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")
    category = Column(SQLEnum(ProductCategory, values_callable=lambda e: [m.value for m in e]), nullable=False)
    price = Column(Float, nullable=True)
    image = Column(String, nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=func.now())

    sizes = relationship("ProductSize", back_populates="product", cascade="all, delete-orphan",
                         order_by="ProductSize.position", lazy="selectin")

    __table_args__ = (
        CheckConstraint('price IS NULL OR price >= 0', name='check_product_price_non_negative'),
    )


class ProductSize(Base):
    __tablename__ = 'product_sizes'

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    size = Column(String(10), nullable=False)
    price = Column(Float, nullable=False)
    position = Column(Integer, nullable=False, default=0)

    product = relationship("Product", back_populates="sizes")

    __table_args__ = (
        CheckConstraint('price >= 0', name='check_size_price_non_negative'),
    )


class ProductSizeDTO(BaseModel):
    size: str
    price: float | None = None


class ProductDTO(BaseModel):
    id: int | None = None
    name: str | None = None
    description: str | None = None
    category: ProductCategory | None = None
    price: float | None = None
    image: str | None = None
    is_available: bool | None = None
    created_at: datetime | None = None
    sizes: list[ProductSizeDTO] = []

    @property
    def is_topping(self) -> bool:
        return self.category == ProductCategory.TOPPING
