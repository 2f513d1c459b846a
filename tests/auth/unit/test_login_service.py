"""
Unit tests for LoginService.login() / register().

Uses in-memory SQLite and the in-memory rate limiter.
"""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from enums.lock_reason import LockReason
from enums.login_outcome_status import LoginOutcomeStatus
from enums.login_status import LoginStatus
from enums.user_role import UserRole
from exceptions.user import EmailAlreadyRegisteredException, InvalidPasswordException
from middleware.rate_limit import InMemoryLoginRateLimiter
from models.login_log import LoginLog
from models.user import User
from repositories.login_log import LoginLogRepository
from services.auth import LoginService

NOW = datetime(2024, 3, 5, 10, 0)
IP = "203.0.113.5"
UA = "pytest"


@pytest.fixture
def login_service():
    return LoginService(InMemoryLoginRateLimiter(max_attempts=10, window_seconds=900))


async def reload(session, user_id: int) -> User:
    result = await session.execute(select(User).where(User.id == user_id).execution_options(populate_existing=True))
    return result.scalar_one()


class TestLogin:

    @pytest.mark.asyncio
    async def test_successful_login(self, test_session, make_user, login_service):
        user = await make_user(password="secret123", email="khach@example.com")
        outcome = await login_service.login("Khach@Example.com", "secret123", IP, UA, test_session, now=NOW)

        assert outcome.status == LoginOutcomeStatus.ALLOWED
        assert outcome.user.id == user.id
        assert outcome.user.last_login == NOW
        stored = await reload(test_session, user.id)
        assert stored.last_login == NOW

    @pytest.mark.asyncio
    async def test_unknown_email(self, test_session, login_service):
        outcome = await login_service.login("nobody@example.com", "whatever", IP, UA, test_session, now=NOW)
        assert outcome.status == LoginOutcomeStatus.DENIED_RETRYABLE
        assert outcome.message == "This e-mail is not registered."

        logs = (await test_session.execute(select(LoginLog))).scalars().all()
        assert len(logs) == 1
        assert logs[0].user_id is None
        assert logs[0].failure_reason == "email_not_registered"

    @pytest.mark.asyncio
    async def test_missing_password(self, test_session, make_user, login_service):
        await make_user(email="khach@example.com")
        outcome = await login_service.login("khach@example.com", "", IP, UA, test_session, now=NOW)
        assert outcome.status == LoginOutcomeStatus.DENIED_RETRYABLE

    @pytest.mark.asyncio
    async def test_wrong_password_reports_attempts_left(self, test_session, make_user, login_service):
        user = await make_user(password="secret123")
        for expected_left in (4, 3, 2, 1):
            outcome = await login_service.login(user.email, "wrong", IP, UA, test_session, now=NOW)
            assert outcome.status == LoginOutcomeStatus.DENIED_RETRYABLE
            assert outcome.attempts_left == expected_left
            assert f"{expected_left} attempts left" in outcome.message

        stored = await reload(test_session, user.id)
        assert stored.login_attempts == 4
        assert stored.is_locked is False

    @pytest.mark.asyncio
    async def test_fifth_failure_locks_account(self, test_session, make_user, login_service):
        user = await make_user(password="secret123", login_attempts=4)
        outcome = await login_service.login(user.email, "wrong", IP, UA, test_session, now=NOW)

        assert outcome.status == LoginOutcomeStatus.DENIED_LOCKED
        assert outcome.attempts_left == 0
        assert "locked" in outcome.message
        stored = await reload(test_session, user.id)
        assert stored.is_locked is True
        assert stored.locked_reason == LockReason.FAILED_LOGIN
        assert stored.lock_until == NOW + timedelta(hours=24)

    @pytest.mark.asyncio
    async def test_locked_account_rejects_correct_password(self, test_session, make_user, login_service):
        user = await make_user(password="secret123", login_attempts=5, is_locked=True,
                               locked_reason=LockReason.FAILED_LOGIN, locked_at=NOW,
                               lock_until=NOW + timedelta(hours=24))
        outcome = await login_service.login(user.email, "secret123", IP, UA, test_session,
                                            now=NOW + timedelta(hours=1))
        assert outcome.status == LoginOutcomeStatus.DENIED_LOCKED
        assert outcome.hours_left == 23

    @pytest.mark.asyncio
    async def test_admin_locked_account(self, test_session, make_user, login_service):
        user = await make_user(password="secret123", is_locked=True, locked_reason=LockReason.ADMIN_ACTION)
        outcome = await login_service.login(user.email, "secret123", IP, UA, test_session, now=NOW)
        assert outcome.status == LoginOutcomeStatus.DENIED_LOCKED
        assert outcome.hours_left is None

    @pytest.mark.asyncio
    async def test_expired_lock_then_success_clears_lock(self, test_session, make_user, login_service):
        user = await make_user(password="secret123", login_attempts=5, is_locked=True,
                               locked_reason=LockReason.FAILED_LOGIN, locked_at=NOW - timedelta(hours=30),
                               lock_until=NOW - timedelta(hours=6))
        outcome = await login_service.login(user.email, "secret123", IP, UA, test_session, now=NOW)
        assert outcome.status == LoginOutcomeStatus.ALLOWED

        stored = await reload(test_session, user.id)
        assert stored.is_locked is False
        assert stored.login_attempts == 0
        assert stored.lock_until is None

    @pytest.mark.asyncio
    async def test_expired_lock_then_failure_restarts_count(self, test_session, make_user, login_service):
        user = await make_user(password="secret123", login_attempts=5, is_locked=True,
                               locked_reason=LockReason.FAILED_LOGIN, locked_at=NOW - timedelta(hours=30),
                               lock_until=NOW - timedelta(hours=6))
        outcome = await login_service.login(user.email, "wrong", IP, UA, test_session, now=NOW)
        assert outcome.status == LoginOutcomeStatus.DENIED_RETRYABLE
        assert outcome.attempts_left == 4

        stored = await reload(test_session, user.id)
        assert stored.is_locked is False
        assert stored.login_attempts == 1

    @pytest.mark.asyncio
    async def test_success_after_three_failures_resets(self, test_session, make_user, login_service):
        user = await make_user(password="secret123")
        for _ in range(3):
            await login_service.login(user.email, "wrong", IP, UA, test_session, now=NOW)
        outcome = await login_service.login(user.email, "secret123", IP, UA, test_session, now=NOW)
        assert outcome.status == LoginOutcomeStatus.ALLOWED

        stored = await reload(test_session, user.id)
        assert stored.login_attempts == 0
        assert stored.lock_until is None

    @pytest.mark.asyncio
    async def test_admin_never_locked(self, test_session, make_user, login_service):
        admin = await make_user(password="secret123", role=UserRole.ADMIN)
        for _ in range(7):
            outcome = await login_service.login(admin.email, "wrong", IP, UA, test_session, now=NOW)
            assert outcome.status == LoginOutcomeStatus.DENIED_RETRYABLE
            assert outcome.attempts_left is None

        stored = await reload(test_session, admin.id)
        assert stored.is_locked is False
        assert stored.login_attempts == 0

    @pytest.mark.asyncio
    async def test_rate_limit_checked_before_credentials(self, test_session, make_user):
        user = await make_user(password="secret123")
        service = LoginService(InMemoryLoginRateLimiter(max_attempts=2, window_seconds=900))
        await service.login(user.email, "secret123", IP, UA, test_session, now=NOW)
        await service.login(user.email, "secret123", IP, UA, test_session, now=NOW)

        outcome = await service.login(user.email, "secret123", IP, UA, test_session, now=NOW)
        assert outcome.status == LoginOutcomeStatus.RATE_LIMITED
        assert outcome.retry_after_sec > 0

        logs = (await test_session.execute(select(LoginLog))).scalars().all()
        assert len(logs) == 2

    @pytest.mark.asyncio
    async def test_login_logs_written(self, test_session, make_user, login_service):
        user = await make_user(password="secret123")
        await login_service.login(user.email, "wrong", IP, UA, test_session, now=NOW)
        await login_service.login(user.email, "secret123", IP, UA, test_session, now=NOW)

        # Newest first
        logs = await LoginLogRepository.get_by_user_id(user.id, test_session)
        assert [log.login_status for log in logs] == [LoginStatus.SUCCESS, LoginStatus.FAILED]
        assert logs[1].failure_reason == "wrong_password"
        assert logs[0].ip_address == IP
        assert logs[0].user_agent == UA

    @pytest.mark.asyncio
    async def test_persistence_failure_does_not_change_outcome(self, test_session, make_user, login_service):
        user = await make_user(password="secret123")
        with patch("services.auth.UserRepository.update_fields",
                   new=AsyncMock(side_effect=OperationalError("UPDATE users", {}, Exception("disk I/O error")))):
            outcome = await login_service.login(user.email, "wrong", IP, UA, test_session, now=NOW)

        assert outcome.status == LoginOutcomeStatus.DENIED_RETRYABLE
        assert outcome.attempts_left == 4


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_customer(self, test_session):
        user = await LoginService.register("Lan", " Lan@Example.com ", "matkhau1", test_session)
        assert user.email == "lan@example.com"
        assert user.role == UserRole.CUSTOMER

    @pytest.mark.asyncio
    async def test_duplicate_email(self, test_session, make_user):
        await make_user(email="lan@example.com")
        with pytest.raises(EmailAlreadyRegisteredException):
            await LoginService.register("Lan", "LAN@example.com", "matkhau1", test_session)

    @pytest.mark.asyncio
    async def test_short_password(self, test_session):
        with pytest.raises(InvalidPasswordException):
            await LoginService.register("Lan", "lan@example.com", "12345", test_session)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("password", ["x" * 100, "ư" * 40])
    async def test_password_over_72_bytes(self, test_session, password):
        with pytest.raises(InvalidPasswordException):
            await LoginService.register("Lan", "lan@example.com", password, test_session)

    @pytest.mark.asyncio
    async def test_registered_user_can_log_in(self, test_session, login_service):
        await LoginService.register("Lan", "lan@example.com", "matkhau1", test_session)
        outcome = await login_service.login("lan@example.com", "matkhau1", IP, UA, test_session, now=NOW)
        assert outcome.status == LoginOutcomeStatus.ALLOWED
