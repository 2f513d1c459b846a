"""
Order-related exceptions.
"""

from .base import ShopException


class OrderException(ShopException):
    """Base exception for order-related errors."""
    pass


class OrderNotFoundException(OrderException):
    """Raised when order is not found in database."""

    def __init__(self, order_id: int):
        super().__init__(
            f"Order {order_id} not found",
            details={'order_id': order_id}
        )
        self.order_id = order_id


class InvalidOrderStateException(OrderException):
    """Raised when order is in invalid state for requested operation."""

    def __init__(self, order_id: int, current_state: str, required_state: str):
        super().__init__(
            f"Order {order_id} is in state '{current_state}', required '{required_state}'",
            details={'order_id': order_id, 'current_state': current_state, 'required_state': required_state}
        )
        self.order_id = order_id
        self.current_state = current_state
        self.required_state = required_state


class OrderOwnershipException(OrderException):
    """Raised when user attempts to access/modify order they don't own."""

    def __init__(self, order_id: int, user_id: int):
        super().__init__(
            f"User {user_id} does not have permission to access order {order_id}",
            details={'order_id': order_id, 'user_id': user_id}
        )
        self.order_id = order_id
        self.user_id = user_id


class InvalidPaymentMethodException(OrderException):
    """Raised when checkout is requested with an unsupported payment method."""

    def __init__(self, payment_method: str):
        super().__init__(
            f"Payment method '{payment_method}' is not accepted at checkout",
            details={'payment_method': payment_method}
        )
        self.payment_method = payment_method


class InsufficientCashException(OrderException):
    """Raised when the cash handed over does not cover the order total."""

    def __init__(self, required: int, provided: int | None):
        super().__init__(
            f"Insufficient cash: required {required}, provided {provided}",
            details={'required': required, 'provided': provided}
        )
        self.required = required
        self.provided = provided
