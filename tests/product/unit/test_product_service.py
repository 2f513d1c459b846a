"""
Unit Tests: ProductService

Tests for services/product.py covering:
- validate_pricing_mode() - toppings use a flat price, drinks use sizes
- create_product()
- get_available() / get_toppings_by_ids()
"""

import pytest

from enums.product_category import ProductCategory
from exceptions.product import InvalidProductDataException, ProductNotFoundException
from models.product import ProductDTO, ProductSizeDTO
from services.product import ProductService


class TestValidatePricingMode:

    def test_topping_with_flat_price(self):
        ProductService.validate_pricing_mode(ProductDTO(name="Pudding", category=ProductCategory.TOPPING,
                                                        price=8000))

    def test_topping_without_price(self):
        with pytest.raises(InvalidProductDataException):
            ProductService.validate_pricing_mode(ProductDTO(name="Pudding", category=ProductCategory.TOPPING))

    def test_topping_with_sizes(self):
        with pytest.raises(InvalidProductDataException):
            ProductService.validate_pricing_mode(ProductDTO(name="Pudding", category=ProductCategory.TOPPING,
                                                            price=8000, sizes=[ProductSizeDTO(size="M", price=1)]))

    def test_drink_without_sizes(self):
        with pytest.raises(InvalidProductDataException):
            ProductService.validate_pricing_mode(ProductDTO(name="Sinh tố bơ", category=ProductCategory.BLENDED,
                                                            price=45000))

    def test_duplicate_sizes(self):
        with pytest.raises(InvalidProductDataException):
            ProductService.validate_pricing_mode(ProductDTO(
                name="Nước cam", category=ProductCategory.JUICE,
                sizes=[ProductSizeDTO(size="M", price=30000), ProductSizeDTO(size="M", price=32000)]
            ))

    def test_negative_size_price(self):
        with pytest.raises(InvalidProductDataException):
            ProductService.validate_pricing_mode(ProductDTO(
                name="Nước cam", category=ProductCategory.JUICE, sizes=[ProductSizeDTO(size="M", price=-1)]
            ))


class TestProductService:

    @pytest.mark.asyncio
    async def test_create_drink_keeps_size_order_and_drops_flat_price(self, test_session):
        product = await ProductService.create_product(ProductDTO(
            name="Trà sữa matcha", category=ProductCategory.MILK_TEA, price=99999,
            sizes=[ProductSizeDTO(size="L", price=45000), ProductSizeDTO(size="M", price=39000)]
        ), test_session)

        assert product.id is not None
        assert product.price is None
        assert [size.size for size in product.sizes] == ["L", "M"]
        assert product.is_available is True

    @pytest.mark.asyncio
    async def test_get_by_id_unknown(self, test_session):
        with pytest.raises(ProductNotFoundException):
            await ProductService.get_by_id(12345, test_session)

    @pytest.mark.asyncio
    async def test_get_available_by_category(self, test_session, catalog):
        catalog["jelly"].is_available = False
        await test_session.commit()

        toppings = await ProductService.get_available(test_session, ProductCategory.TOPPING)
        assert [product.name for product in toppings] == ["Trân châu đen"]

        everything = await ProductService.get_available(test_session)
        assert len(everything) == 4

    @pytest.mark.asyncio
    async def test_get_toppings_by_ids_dedupes_and_filters(self, test_session, catalog):
        toppings = await ProductService.get_toppings_by_ids(
            [catalog["pearls"].id, catalog["pearls"].id, catalog["coffee"].id], test_session
        )
        assert [topping.id for topping in toppings] == [catalog["pearls"].id]
