"""
Models Package

This file ensures all SQLAlchemy models are imported and registered,
which is required for relationships to work correctly.
"""

from models.base import Base
from models.product import Product, ProductSize
from models.user import User
from models.cartItem import CartItem
from models.order import Order
from models.orderItem import OrderItem
from models.voucher import Voucher
from models.login_log import LoginLog
from models.audit_log import AuditLog

__all__ = [
    'Base',
    'Product',
    'ProductSize',
    'User',
    'CartItem',
    'Order',
    'OrderItem',
    'Voucher',
    'LoginLog',
    'AuditLog',
]
