"""
Product-related exceptions.
"""

from .base import ShopException


class ProductException(ShopException):
    """Base exception for product-related errors."""
    pass


class ProductNotFoundException(ProductException):
    """Raised when product is not found in database."""

    def __init__(self, product_id: int):
        super().__init__(
            f"Product {product_id} not found",
            details={'product_id': product_id}
        )
        self.product_id = product_id


class ProductUnavailableException(ProductException):
    """Raised when a product exists but is not currently sold."""

    def __init__(self, product_id: int):
        super().__init__(
            f"Product {product_id} is not available",
            details={'product_id': product_id}
        )
        self.product_id = product_id


class InvalidProductDataException(ProductException):
    """Raised when product data does not match its category's pricing mode."""

    def __init__(self, name: str, reason: str):
        super().__init__(
            f"Invalid product data for '{name}': {reason}",
            details={'name': name, 'reason': reason}
        )
        self.name = name
        self.reason = reason
