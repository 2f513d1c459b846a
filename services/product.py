import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_commit
from enums.product_category import ProductCategory
from exceptions.product import ProductNotFoundException, InvalidProductDataException
from models.product import ProductDTO
from repositories.product import ProductRepository

logger = logging.getLogger(__name__)


class ProductService:

    @staticmethod
    def validate_pricing_mode(product_dto: ProductDTO) -> None:
        """
        Toppings carry a flat price and no sizes, every other category
        carries at least one size price.
        """
        if product_dto.category is None:
            raise InvalidProductDataException(product_dto.name or "", "category is required")
        if product_dto.category == ProductCategory.TOPPING:
            if product_dto.price is None or product_dto.price < 0:
                raise InvalidProductDataException(product_dto.name or "", "toppings need a flat price")
            if len(product_dto.sizes) > 0:
                raise InvalidProductDataException(product_dto.name or "", "toppings cannot have sizes")
        else:
            if len(product_dto.sizes) == 0:
                raise InvalidProductDataException(product_dto.name or "", "at least one size price is required")
            labels = [size.size for size in product_dto.sizes]
            if len(labels) != len(set(labels)):
                raise InvalidProductDataException(product_dto.name or "", "duplicate size labels")
            if any(size.price is None or size.price < 0 for size in product_dto.sizes):
                raise InvalidProductDataException(product_dto.name or "", "size prices must be non-negative")

    @staticmethod
    async def create_product(product_dto: ProductDTO, session: AsyncSession | Session) -> ProductDTO:
        ProductService.validate_pricing_mode(product_dto)
        if product_dto.category != ProductCategory.TOPPING:
            # Drinks are priced by size only
            product_dto = product_dto.model_copy(update={"price": None})
        product_id = await ProductRepository.create(product_dto, session)
        await session_commit(session)
        logger.info(f"[Product] Created product {product_id} ({product_dto.name})")
        return await ProductRepository.get_by_id(product_id, session)

    @staticmethod
    async def get_by_id(product_id: int, session: AsyncSession | Session) -> ProductDTO:
        product = await ProductRepository.get_by_id(product_id, session)
        if product is None:
            raise ProductNotFoundException(product_id)
        return product

    @staticmethod
    async def get_available(session: AsyncSession | Session,
                            category: ProductCategory | None = None) -> list[ProductDTO]:
        return await ProductRepository.get_available(session, category)

    @staticmethod
    async def get_toppings_by_ids(topping_ids: list[int], session: AsyncSession | Session) -> list[ProductDTO]:
        """Unknown ids and non-topping products are dropped."""
        return await ProductRepository.get_toppings_by_ids(sorted(set(topping_ids)), session)
