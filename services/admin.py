import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_commit
from enums.audit_action import AuditAction
from enums.lock_reason import LockReason
from exceptions.user import UserNotFoundException, SelfLockException, PermissionDeniedException
from models.login_state import ActiveLockState, AdminLockState
from models.user import UserDTO
from repositories.audit_log import AuditLogRepository
from repositories.user import UserRepository
from utils.password import hash_password, validate_new_password

logger = logging.getLogger(__name__)


class AdminService:
    """Account administration: manual locks, unlocks and password resets."""

    @staticmethod
    async def _get_admin_and_target(user_id: int, admin_id: int, action: str,
                                    session: AsyncSession | Session) -> tuple[UserDTO, UserDTO]:
        admin = await UserRepository.get_by_id(admin_id, session)
        if admin is None or not admin.is_admin:
            raise PermissionDeniedException(admin_id, action)
        if user_id == admin_id:
            raise SelfLockException(admin_id)
        user = await UserRepository.get_by_id(user_id, session)
        if user is None:
            raise UserNotFoundException(user_id=user_id)
        return admin, user

    @staticmethod
    async def lock_account(user_id: int,
                           admin_id: int,
                           session: AsyncSession | Session,
                           reason: LockReason = LockReason.ADMIN_ACTION,
                           now: datetime | None = None) -> UserDTO:
        """
        Locks an account until an administrator unlocks it.

        Raises:
            PermissionDeniedException: admin_id is not an administrator
            SelfLockException: an administrator tried to lock their own account
            UserNotFoundException: no such user
        """
        if reason == LockReason.FAILED_LOGIN:
            # Time-bound locks are only set by the Login Attempt Guard
            reason = LockReason.ADMIN_ACTION
        if now is None:
            now = datetime.now()
        admin, user = await AdminService._get_admin_and_target(user_id, admin_id, "lock_account", session)

        state = AdminLockState(reason=reason, login_attempts=user.login_attempts or 0,
                               locked_at=now, locked_by_id=admin.id)
        await UserRepository.update_fields(user.id, state.to_fields(), session)
        await AuditLogRepository.create(admin.id, AuditAction.ACCOUNT_LOCK, "user", user.id, session,
                                        details={"reason": reason.value})
        await session_commit(session)
        logger.warning(f"[Admin] User {user.id} locked by admin {admin.id} ({reason.value})")
        return await UserRepository.get_by_id(user.id, session)

    @staticmethod
    async def unlock_account(user_id: int, admin_id: int, session: AsyncSession | Session) -> UserDTO:
        admin, user = await AdminService._get_admin_and_target(user_id, admin_id, "unlock_account", session)
        await UserRepository.update_fields(user.id, ActiveLockState(login_attempts=0).to_fields(), session)
        await AuditLogRepository.create(admin.id, AuditAction.ACCOUNT_UNLOCK, "user", user.id, session,
                                        details={"previous_reason": user.locked_reason.value
                                                 if user.locked_reason else None})
        await session_commit(session)
        logger.info(f"[Admin] User {user.id} unlocked by admin {admin.id}")
        return await UserRepository.get_by_id(user.id, session)

    @staticmethod
    async def reset_password(user_id: int, new_password: str, admin_id: int,
                             session: AsyncSession | Session) -> UserDTO:
        """
        Sets a new password and clears failed attempts and any time-bound lock.
        Administrator locks stay in place.
        """
        validate_new_password(new_password)
        admin, user = await AdminService._get_admin_and_target(user_id, admin_id, "reset_password", session)

        fields = {"password_hash": hash_password(new_password), "login_attempts": 0, "lock_until": None}
        if user.is_locked and user.locked_reason in (None, LockReason.FAILED_LOGIN):
            fields.update(ActiveLockState(login_attempts=0).to_fields())
        await UserRepository.update_fields(user.id, fields, session)
        await AuditLogRepository.create(admin.id, AuditAction.PASSWORD_RESET, "user", user.id, session)
        await session_commit(session)
        logger.info(f"[Admin] Password of user {user.id} reset by admin {admin.id}")
        return await UserRepository.get_by_id(user.id, session)

    @staticmethod
    async def get_locked_users(session: AsyncSession | Session) -> list[UserDTO]:
        return await UserRepository.get_locked_users(session)
