import json
from datetime import datetime
from typing import Any

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from enums.audit_action import AuditAction
from models.audit_log import AuditLog, AuditLogDTO


class AuditLogRepository:
    @staticmethod
    async def create(actor_id: int | None,
                     action: AuditAction,
                     resource_type: str,
                     resource_id: int | None,
                     session: AsyncSession | Session,
                     details: dict[str, Any] | None = None,
                     status: str = "success") -> int:
        audit_log = AuditLog(
            actor_id=actor_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            status=status,
            details=json.dumps(details, default=str, ensure_ascii=False) if details is not None else None
        )
        session.add(audit_log)
        await session_flush(session)
        return audit_log.id

    @staticmethod
    async def get_by_resource(resource_type: str, resource_id: int,
                              session: AsyncSession | Session) -> list[AuditLogDTO]:
        stmt = (select(AuditLog)
                .where(AuditLog.resource_type == resource_type,
                       AuditLog.resource_id == resource_id)
                .order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()))
        audit_logs = await session_execute(stmt, session)
        return [AuditLogDTO.model_validate(log, from_attributes=True) for log in audit_logs.scalars().all()]

    @staticmethod
    async def delete_older_than(cutoff: datetime, session: AsyncSession | Session) -> int:
        stmt = delete(AuditLog).where(AuditLog.timestamp < cutoff)
        result = await session_execute(stmt, session)
        return result.rowcount
