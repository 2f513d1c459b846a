from enum import Enum


class LockReason(str, Enum):
    """
    Why an account is locked.

    FAILED_LOGIN: too many wrong passwords, expires automatically after LOGIN_LOCK_HOURS
    ADMIN_ACTION: locked by an administrator, cleared only by an explicit unlock
    SECURITY: locked for security reasons, cleared only by an explicit unlock
    """
    FAILED_LOGIN = "failed_login"
    ADMIN_ACTION = "admin_action"
    SECURITY = "security"
