"""
User-related exceptions.
"""

from .base import ShopException


class UserException(ShopException):
    """Base exception for user-related errors."""
    pass


class UserNotFoundException(UserException):
    """Raised when user is not found in database."""

    def __init__(self, user_id: int | None = None, email: str | None = None):
        if user_id:
            message = f"User with ID {user_id} not found"
            details = {'user_id': user_id}
        elif email:
            message = f"User with email {email} not found"
            details = {'email': email}
        else:
            message = "User not found"
            details = {}

        super().__init__(message, details)
        self.user_id = user_id
        self.email = email


class EmailAlreadyRegisteredException(UserException):
    """Raised when registering with an email that already has an account."""

    def __init__(self, email: str):
        super().__init__(
            f"Email {email} is already registered",
            details={'email': email}
        )
        self.email = email


class SelfLockException(UserException):
    """Raised when an administrator tries to lock their own account."""

    def __init__(self, user_id: int):
        super().__init__(
            f"User {user_id} cannot lock their own account",
            details={'user_id': user_id}
        )
        self.user_id = user_id


class PermissionDeniedException(UserException):
    """Raised when a non-privileged user attempts an administrative action."""

    def __init__(self, user_id: int, action: str):
        super().__init__(
            f"User {user_id} is not allowed to {action}",
            details={'user_id': user_id, 'action': action}
        )
        self.user_id = user_id
        self.action = action


class InvalidPasswordException(UserException):
    """Raised when a new password does not meet the minimum requirements."""

    def __init__(self, reason: str):
        super().__init__(
            f"Invalid password: {reason}",
            details={'reason': reason}
        )
        self.reason = reason
