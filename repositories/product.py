from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from enums.product_category import ProductCategory
from models.product import Product, ProductDTO, ProductSize


class ProductRepository:
    @staticmethod
    async def get_by_id(product_id: int, session: AsyncSession | Session) -> ProductDTO | None:
        stmt = select(Product).where(Product.id == product_id)
        product = await session_execute(stmt, session)
        product = product.scalar()
        if product is not None:
            return ProductDTO.model_validate(product, from_attributes=True)
        else:
            return None

    @staticmethod
    async def get_toppings_by_ids(topping_ids: list[int], session: AsyncSession | Session) -> list[ProductDTO]:
        if len(topping_ids) == 0:
            return []
        stmt = (select(Product)
                .where(Product.id.in_(topping_ids),
                       Product.category == ProductCategory.TOPPING)
                .order_by(Product.id))
        toppings = await session_execute(stmt, session)
        return [ProductDTO.model_validate(topping, from_attributes=True) for topping in toppings.scalars().all()]

    @staticmethod
    async def get_available(session: AsyncSession | Session,
                            category: ProductCategory | None = None) -> list[ProductDTO]:
        stmt = select(Product).where(Product.is_available == True)
        if category is not None:
            stmt = stmt.where(Product.category == category)
        stmt = stmt.order_by(Product.category, Product.name)
        products = await session_execute(stmt, session)
        return [ProductDTO.model_validate(product, from_attributes=True) for product in products.scalars().all()]

    @staticmethod
    async def create(product_dto: ProductDTO, session: AsyncSession | Session) -> int:
        product_data = product_dto.model_dump(exclude_none=True, exclude={"id", "sizes", "created_at"})
        product = Product(**product_data)
        product.sizes = [ProductSize(size=size.size, price=size.price, position=position)
                         for position, size in enumerate(product_dto.sizes)]
        session.add(product)
        await session_flush(session)
        return product.id
