"""
Custom exceptions for the shop.

This module provides a hierarchy of custom exceptions for consistent error handling
throughout the application.

Exception Hierarchy:
--------------------
ShopException (base)
├── ProductException
│   ├── ProductNotFoundException
│   ├── ProductUnavailableException
│   └── InvalidProductDataException
├── CartException
│   ├── EmptyCartException
│   ├── CartItemNotFoundException
│   ├── ToppingNotInCartItemException
│   └── InvalidQuantityException
├── OrderException
│   ├── OrderNotFoundException
│   ├── InvalidOrderStateException
│   ├── OrderOwnershipException
│   ├── InvalidPaymentMethodException
│   └── InsufficientCashException
├── UserException
│   ├── UserNotFoundException
│   ├── EmailAlreadyRegisteredException
│   ├── SelfLockException
│   ├── PermissionDeniedException
│   └── InvalidPasswordException
└── VoucherException
    ├── VoucherNotFoundException
    └── VoucherNotApplicableException

Login failures are not exceptions: the login flow returns a LoginOutcome
(allowed / denied / locked / rate limited) so callers can show the message.

Usage:
------
Services raise specific exceptions:
    raise OrderNotFoundException(order_id=123)

Callers catch and display user-friendly messages:
    try:
        await OrderService.cancel_order(order_id, user, session)
    except OrderException as e:
        return {"success": False, "message": str(e)}
"""

from .base import ShopException
from .product import ProductException, ProductNotFoundException, ProductUnavailableException, InvalidProductDataException
from .cart import (
    CartException,
    EmptyCartException,
    CartItemNotFoundException,
    ToppingNotInCartItemException,
    InvalidQuantityException
)
from .order import (
    OrderException,
    OrderNotFoundException,
    InvalidOrderStateException,
    OrderOwnershipException,
    InvalidPaymentMethodException,
    InsufficientCashException
)
from .user import (
    UserException,
    UserNotFoundException,
    EmailAlreadyRegisteredException,
    SelfLockException,
    PermissionDeniedException,
    InvalidPasswordException
)
from .voucher import VoucherException, VoucherNotFoundException, VoucherNotApplicableException

__all__ = [
    # Base
    'ShopException',

    # Product
    'ProductException',
    'ProductNotFoundException',
    'ProductUnavailableException',
    'InvalidProductDataException',

    # Cart
    'CartException',
    'EmptyCartException',
    'CartItemNotFoundException',
    'ToppingNotInCartItemException',
    'InvalidQuantityException',

    # Order
    'OrderException',
    'OrderNotFoundException',
    'InvalidOrderStateException',
    'OrderOwnershipException',
    'InvalidPaymentMethodException',
    'InsufficientCashException',

    # User
    'UserException',
    'UserNotFoundException',
    'EmailAlreadyRegisteredException',
    'SelfLockException',
    'PermissionDeniedException',
    'InvalidPasswordException',

    # Voucher
    'VoucherException',
    'VoucherNotFoundException',
    'VoucherNotApplicableException',
]
