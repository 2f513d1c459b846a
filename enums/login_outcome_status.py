from enum import Enum


class LoginOutcomeStatus(str, Enum):
    ALLOWED = "allowed"
    DENIED_RETRYABLE = "denied_retryable"  # Wrong credentials, attempts remain
    DENIED_LOCKED = "denied_locked"        # Time-bound or administrator lock
    RATE_LIMITED = "rate_limited"          # Too many attempts for this IP + identifier
