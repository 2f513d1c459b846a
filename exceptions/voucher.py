"""
Voucher-related exceptions.
"""

from .base import ShopException


class VoucherException(ShopException):
    """Base exception for voucher-related errors."""
    pass


class VoucherNotFoundException(VoucherException):
    """Raised when a voucher code does not exist or is inactive."""

    def __init__(self, code: str):
        super().__init__(
            f"Voucher '{code}' not found or inactive",
            details={'code': code}
        )
        self.code = code


class VoucherNotApplicableException(VoucherException):
    """Raised when a voucher exists but its conditions are not met."""

    def __init__(self, code: str, reason: str):
        super().__init__(
            f"Voucher '{code}' is not applicable: {reason}",
            details={'code': code, 'reason': reason}
        )
        self.code = code
        self.reason = reason
