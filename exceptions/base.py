"""
Base exception class for the shop.
"""

from typing import Any


class ShopException(Exception):
    """
    Base exception for all shop errors.

    Catching ShopException covers every domain error raised by the services.
    The web layer turns it into a 400 response via to_dict().

    Attributes:
        message: Human-readable error message
        details: Context for logs and API clients (entity IDs, states, ...)
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {"error": type(self).__name__, "message": self.message, "details": self.details}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        if self.details:
            details_str = ', '.join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.__class__.__name__}('{self.message}', {details_str})"
        return f"{self.__class__.__name__}('{self.message}')"
