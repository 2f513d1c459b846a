from datetime import datetime

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from models.login_log import LoginLog, LoginLogDTO


class LoginLogRepository:
    @staticmethod
    async def create(login_log: LoginLogDTO, session: AsyncSession | Session) -> int:
        login_log = LoginLog(**login_log.model_dump(exclude_none=True, exclude={"id"}))
        session.add(login_log)
        await session_flush(session)
        return login_log.id

    @staticmethod
    async def get_by_user_id(user_id: int, session: AsyncSession | Session, limit: int = 50) -> list[LoginLogDTO]:
        stmt = (select(LoginLog)
                .where(LoginLog.user_id == user_id)
                .order_by(LoginLog.login_time.desc(), LoginLog.id.desc())
                .limit(limit))
        login_logs = await session_execute(stmt, session)
        return [LoginLogDTO.model_validate(log, from_attributes=True) for log in login_logs.scalars().all()]

    @staticmethod
    async def delete_older_than(cutoff: datetime, session: AsyncSession | Session) -> int:
        stmt = delete(LoginLog).where(LoginLog.login_time < cutoff)
        result = await session_execute(stmt, session)
        return result.rowcount
