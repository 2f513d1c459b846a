import logging
import math
from datetime import datetime, timedelta

import config
from enums.lock_reason import LockReason
from enums.login_outcome_status import LoginOutcomeStatus
from enums.shop_entity import ShopEntity
from models.login_state import ActiveLockState, TimedLockState, AdminLockState, LockState, FailureResult, \
    LoginOutcomeDTO
from models.user import UserDTO
from utils.localizator import Localizator

logger = logging.getLogger(__name__)


class LoginAttemptGuard:
    """
    Per-account lockout after repeated wrong passwords.

    Active --(LOGIN_MAX_ATTEMPTS failures)--> Timed lock (LOGIN_LOCK_HOURS)
    Timed lock --(expired + next attempt)--> Active
    Admin lock --(explicit unlock only)--> Active

    Administrator accounts are never locked by this guard.
    The guard only computes states. Persisting them is up to the caller.
    """

    @staticmethod
    def state_of(user: UserDTO) -> LockState:
        attempts = user.login_attempts or 0
        if not user.is_locked:
            return ActiveLockState(login_attempts=attempts)
        if user.lock_until is not None:
            return TimedLockState(login_attempts=attempts, locked_at=user.locked_at, lock_until=user.lock_until)
        return AdminLockState(reason=user.locked_reason or LockReason.ADMIN_ACTION,
                              login_attempts=attempts,
                              locked_at=user.locked_at,
                              locked_by_id=user.locked_by_id)

    @staticmethod
    def check_lock(user: UserDTO, now: datetime, lang: str | None = None) -> LoginOutcomeDTO | None:
        """Returns a DENIED_LOCKED outcome while a lock is in force, otherwise None."""
        state = LoginAttemptGuard.state_of(user)
        match state:
            case TimedLockState() if not state.is_expired(now):
                remaining_seconds = (state.lock_until - now).total_seconds()
                hours_left = math.ceil(remaining_seconds / 3600)
                return LoginOutcomeDTO(
                    status=LoginOutcomeStatus.DENIED_LOCKED,
                    message=Localizator.get_text(ShopEntity.USER, "account_locked_hours_left", lang)
                    .format(hours_left=hours_left),
                    hours_left=hours_left
                )
            case AdminLockState():
                return LoginOutcomeDTO(
                    status=LoginOutcomeStatus.DENIED_LOCKED,
                    message=Localizator.get_text(ShopEntity.USER, "account_locked_contact_admin", lang)
                )
            case _:
                return None

    @staticmethod
    def register_failure(user: UserDTO, now: datetime) -> FailureResult:
        if user.is_admin:
            logger.info(f"[LoginGuard] Failed login for admin user {user.id}, lockout not applied")
            return FailureResult()

        state = LoginAttemptGuard.state_of(user)
        if isinstance(state, TimedLockState) and state.is_expired(now):
            # The expired lock is lifted and this failure counts as the first new attempt
            new_state = ActiveLockState(login_attempts=1)
        elif isinstance(state, AdminLockState):
            # check_lock() rejects these before the password is verified
            return FailureResult(new_state=state, attempts_left=0, locked=True)
        else:
            attempts = state.login_attempts + 1
            if attempts >= config.LOGIN_MAX_ATTEMPTS:
                new_state = TimedLockState(login_attempts=attempts,
                                           locked_at=now,
                                           lock_until=now + timedelta(hours=config.LOGIN_LOCK_HOURS))
                logger.warning(f"[LoginGuard] User {user.id} locked after {attempts} failed attempts "
                               f"until {new_state.lock_until.isoformat()}")
                return FailureResult(new_state=new_state, attempts_left=0, locked=True)
            new_state = ActiveLockState(login_attempts=attempts)

        return FailureResult(new_state=new_state,
                             attempts_left=config.LOGIN_MAX_ATTEMPTS - new_state.login_attempts,
                             locked=False)

    @staticmethod
    def register_success(user: UserDTO) -> ActiveLockState | None:
        """Returns the reset state, or None when there is nothing to write."""
        if (user.login_attempts or 0) > 0 or user.is_locked or user.lock_until is not None:
            return ActiveLockState(login_attempts=0)
        return None
