from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from enums.lock_reason import LockReason
from enums.login_outcome_status import LoginOutcomeStatus
from models.user import UserDTO


class ActiveLockState(BaseModel):
    kind: Literal["active"] = "active"
    login_attempts: int = 0

    def to_fields(self) -> dict[str, Any]:
        return {
            "login_attempts": self.login_attempts,
            "is_locked": False,
            "locked_reason": None,
            "lock_until": None,
            "locked_at": None,
            "locked_by_id": None,
        }


class TimedLockState(BaseModel):
    """Locked after too many failed logins. Expires at lock_until."""
    kind: Literal["timed"] = "timed"
    login_attempts: int
    locked_at: datetime | None = None
    lock_until: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.lock_until <= now

    def to_fields(self) -> dict[str, Any]:
        return {
            "login_attempts": self.login_attempts,
            "is_locked": True,
            "locked_reason": LockReason.FAILED_LOGIN,
            "lock_until": self.lock_until,
            "locked_at": self.locked_at,
            "locked_by_id": None,
        }


class AdminLockState(BaseModel):
    """Administrator or security lock. Never expires, cleared by an explicit unlock."""
    kind: Literal["admin"] = "admin"
    reason: LockReason = LockReason.ADMIN_ACTION
    login_attempts: int = 0
    locked_at: datetime | None = None
    locked_by_id: int | None = None

    def to_fields(self) -> dict[str, Any]:
        return {
            "login_attempts": self.login_attempts,
            "is_locked": True,
            "locked_reason": self.reason,
            "lock_until": None,
            "locked_at": self.locked_at,
            "locked_by_id": self.locked_by_id,
        }


LockState = Annotated[Union[ActiveLockState, TimedLockState, AdminLockState], Field(discriminator="kind")]


class FailureResult(BaseModel):
    # None when nothing has to be written (administrator accounts)
    new_state: LockState | None = None
    attempts_left: int | None = None
    locked: bool = False


class LoginOutcomeDTO(BaseModel):
    status: LoginOutcomeStatus
    message: str
    attempts_left: int | None = None
    hours_left: int | None = None
    retry_after_sec: int | None = None
    user: UserDTO | None = None
