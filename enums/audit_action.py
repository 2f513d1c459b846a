from enum import Enum


class AuditAction(str, Enum):
    LOGIN = "login"
    ACCOUNT_LOCK = "account_lock"
    ACCOUNT_UNLOCK = "account_unlock"
    PASSWORD_RESET = "password_reset"
    ORDER_STATUS_CHANGE = "order_status_change"
    ORDER_CANCEL = "order_cancel"
