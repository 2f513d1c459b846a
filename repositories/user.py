from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from models.user import UserDTO, User, UserCredentialsDTO


class UserRepository:
    @staticmethod
    async def get_by_id(user_id: int, session: AsyncSession | Session) -> UserDTO | None:
        stmt = select(User).where(User.id == user_id)
        user = await session_execute(stmt, session)
        user = user.scalar()
        if user is not None:
            return UserDTO.model_validate(user, from_attributes=True)
        else:
            return user

    @staticmethod
    async def get_by_email(email: str, session: AsyncSession | Session) -> UserDTO | None:
        stmt = select(User).where(User.email == email.strip().lower())
        user = await session_execute(stmt, session)
        user = user.scalar()
        if user is not None:
            return UserDTO.model_validate(user, from_attributes=True)
        else:
            return user

    @staticmethod
    async def get_credentials_by_email(email: str, session: AsyncSession | Session) -> UserCredentialsDTO | None:
        stmt = select(User).where(User.email == email.strip().lower())
        user = await session_execute(stmt, session)
        user = user.scalar()
        if user is None:
            return None
        return UserCredentialsDTO.model_validate(user, from_attributes=True)

    @staticmethod
    async def update_fields(user_id: int, fields: dict[str, Any], session: Session | AsyncSession) -> None:
        """
        Writes the given columns as-is, None included.

        Clearing lock fields (lock_until, locked_reason, ...) needs explicit NULLs.
        """
        stmt = update(User).where(User.id == user_id).values(**fields)
        await session_execute(stmt, session)

    @staticmethod
    async def create(user_dto: UserDTO, password_hash: str, session: Session | AsyncSession) -> int:
        user_data = user_dto.model_dump(exclude_none=True)
        user_data.pop("id", None)
        user = User(**user_data, password_hash=password_hash)
        session.add(user)
        await session_flush(session)
        return user.id

    @staticmethod
    async def get_locked_users(session: Session | AsyncSession) -> list[UserDTO]:
        """
        Get all locked users ordered by lock date (most recent first).

        Includes time-bound locks that may already have expired; they are
        cleared lazily on the next login attempt.
        """
        stmt = (
            select(User)
            .where(User.is_locked == True)
            .order_by(User.locked_at.desc())
        )
        result = await session_execute(stmt, session)
        users = result.scalars().all()
        return [UserDTO.model_validate(user, from_attributes=True) for user in users]
