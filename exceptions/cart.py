"""
Cart-related exceptions.
"""

from .base import ShopException


class CartException(ShopException):
    """Base exception for cart-related errors."""
    pass


class EmptyCartException(CartException):
    """Raised when trying to checkout with empty cart."""

    def __init__(self, user_id: int):
        super().__init__(
            f"Cart is empty for user {user_id}",
            details={'user_id': user_id}
        )
        self.user_id = user_id


class CartItemNotFoundException(CartException):
    """Raised when cart item not found."""

    def __init__(self, cart_item_id: int):
        super().__init__(
            f"Cart item {cart_item_id} not found",
            details={'cart_item_id': cart_item_id}
        )
        self.cart_item_id = cart_item_id


class ToppingNotInCartItemException(CartException):
    """Raised when removing a topping the cart line does not carry."""

    def __init__(self, cart_item_id: int, topping_id: int):
        super().__init__(
            f"Topping {topping_id} not found in cart item {cart_item_id}",
            details={'cart_item_id': cart_item_id, 'topping_id': topping_id}
        )
        self.cart_item_id = cart_item_id
        self.topping_id = topping_id


class InvalidQuantityException(CartException):
    """Raised when a cart line is added with a quantity below 1."""

    def __init__(self, quantity: int):
        super().__init__(
            f"Invalid quantity {quantity}, must be at least 1",
            details={'quantity': quantity}
        )
        self.quantity = quantity
