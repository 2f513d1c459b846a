import logging
from datetime import datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

import config
from db import session_commit, session_rollback
from enums.login_outcome_status import LoginOutcomeStatus
from enums.login_status import LoginStatus
from enums.shop_entity import ShopEntity
from enums.user_role import UserRole
from exceptions.user import EmailAlreadyRegisteredException
from middleware.rate_limit import LoginRateLimiter, login_rate_limit_key
from models.login_log import LoginLogDTO
from models.login_state import LoginOutcomeDTO
from models.user import UserDTO, UserCredentialsDTO
from repositories.login_log import LoginLogRepository
from repositories.user import UserRepository
from services.login_guard import LoginAttemptGuard
from utils.localizator import Localizator
from utils.password import hash_password, verify_password, validate_new_password

logger = logging.getLogger(__name__)


class LoginService:
    """
    E-mail/password authentication.

    Order of checks on every attempt:
    1. Rate limit per (client IP, identifier), before any database work
    2. Account lookup
    3. Account lock (time-bound or administrator)
    4. Password verification, feeding the Login Attempt Guard

    Failing to persist attempt counters or login logs never changes the
    outcome returned to the caller.
    """

    def __init__(self, rate_limiter: LoginRateLimiter):
        self.rate_limiter = rate_limiter

    async def login(self,
                    identifier: str,
                    password: str,
                    client_ip: str,
                    user_agent: str,
                    session: AsyncSession | Session,
                    now: datetime | None = None,
                    lang: str | None = None) -> LoginOutcomeDTO:
        if now is None:
            now = datetime.now()
        identifier = (identifier or "").strip()

        decision = await self.rate_limiter.hit(login_rate_limit_key(client_ip, identifier))
        if not decision.allowed:
            return LoginOutcomeDTO(
                status=LoginOutcomeStatus.RATE_LIMITED,
                message=Localizator.get_text(ShopEntity.USER, "too_many_login_attempts", lang)
                .format(retry_after=decision.retry_after_sec),
                retry_after_sec=decision.retry_after_sec
            )

        if not identifier or not password:
            return LoginOutcomeDTO(
                status=LoginOutcomeStatus.DENIED_RETRYABLE,
                message=Localizator.get_text(ShopEntity.USER, "missing_credentials", lang)
            )

        user = await UserRepository.get_credentials_by_email(identifier, session)
        if user is None:
            await self._record(None, None, identifier, client_ip, user_agent,
                               LoginStatus.FAILED, "email_not_registered", now, session)
            return LoginOutcomeDTO(
                status=LoginOutcomeStatus.DENIED_RETRYABLE,
                message=Localizator.get_text(ShopEntity.USER, "email_not_registered", lang)
            )

        locked_outcome = LoginAttemptGuard.check_lock(user, now, lang)
        if locked_outcome is not None:
            await self._record(user.id, None, user.email, client_ip, user_agent,
                               LoginStatus.FAILED, "account_locked", now, session)
            return locked_outcome

        if not verify_password(password, user.password_hash):
            return await self._handle_wrong_password(user, client_ip, user_agent, now, session, lang)

        fields: dict[str, Any] = {"last_login": now}
        reset_state = LoginAttemptGuard.register_success(user)
        if reset_state is not None:
            fields.update(reset_state.to_fields())
        await self._record(user.id, fields, user.email, client_ip, user_agent,
                           LoginStatus.SUCCESS, None, now, session)

        user_data = user.model_dump(exclude={"password_hash"})
        user_data.update(fields)
        logger.info(f"[Auth] User {user.id} logged in from {client_ip}")
        return LoginOutcomeDTO(
            status=LoginOutcomeStatus.ALLOWED,
            message=Localizator.get_text(ShopEntity.USER, "login_success", lang),
            user=UserDTO.model_validate(user_data)
        )

    async def _handle_wrong_password(self,
                                     user: UserCredentialsDTO,
                                     client_ip: str,
                                     user_agent: str,
                                     now: datetime,
                                     session: AsyncSession | Session,
                                     lang: str | None) -> LoginOutcomeDTO:
        result = LoginAttemptGuard.register_failure(user, now)
        fields = result.new_state.to_fields() if result.new_state is not None else None
        await self._record(user.id, fields, user.email, client_ip, user_agent,
                           LoginStatus.FAILED, "wrong_password", now, session)

        if result.locked:
            return LoginOutcomeDTO(
                status=LoginOutcomeStatus.DENIED_LOCKED,
                message=Localizator.get_text(ShopEntity.USER, "account_locked_failed_logins", lang)
                .format(max_attempts=config.LOGIN_MAX_ATTEMPTS, lock_hours=config.LOGIN_LOCK_HOURS),
                attempts_left=0,
                hours_left=config.LOGIN_LOCK_HOURS
            )
        if result.attempts_left is None:
            return LoginOutcomeDTO(
                status=LoginOutcomeStatus.DENIED_RETRYABLE,
                message=Localizator.get_text(ShopEntity.USER, "wrong_password", lang)
            )
        return LoginOutcomeDTO(
            status=LoginOutcomeStatus.DENIED_RETRYABLE,
            message=Localizator.get_text(ShopEntity.USER, "wrong_password_attempts_left", lang)
            .format(attempts_left=result.attempts_left),
            attempts_left=result.attempts_left
        )

    @staticmethod
    async def _record(user_id: int | None,
                      fields: dict[str, Any] | None,
                      username: str,
                      client_ip: str,
                      user_agent: str,
                      login_status: LoginStatus,
                      failure_reason: str | None,
                      now: datetime,
                      session: AsyncSession | Session) -> None:
        """Writes attempt state and the login log in one transaction. Errors are logged, not raised."""
        try:
            if user_id is not None and fields:
                await UserRepository.update_fields(user_id, fields, session)
            await LoginLogRepository.create(LoginLogDTO(
                user_id=user_id,
                username=username,
                ip_address=client_ip,
                user_agent=user_agent or "",
                login_status=login_status,
                failure_reason=failure_reason,
                login_time=now
            ), session)
            await session_commit(session)
        except SQLAlchemyError as e:
            logger.error(f"[Auth] Failed to persist login attempt for user {user_id}: {e}")
            await session_rollback(session)

    @staticmethod
    async def register(name: str, email: str, password: str, session: AsyncSession | Session) -> UserDTO:
        validate_new_password(password)
        email = email.strip().lower()
        existing = await UserRepository.get_by_email(email, session)
        if existing is not None:
            raise EmailAlreadyRegisteredException(email)

        user_id = await UserRepository.create(UserDTO(name=name.strip(), email=email, role=UserRole.CUSTOMER),
                                              hash_password(password), session)
        await session_commit(session)
        logger.info(f"[Auth] Registered user {user_id}")
        return await UserRepository.get_by_id(user_id, session)
