"""Login/Audit Log Cleanup Job

Deletes database log records past their retention period:
- Login logs older than LOGIN_LOG_RETENTION_DAYS (default 30)
- Audit logs older than AUDIT_LOG_RETENTION_DAYS (default 90)

Runs once on startup and then every LOG_CLEANUP_INTERVAL_HOURS.
"""

import asyncio
import logging
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError

import config
from db import get_db_session, session_commit, session_rollback
from repositories.audit_log import AuditLogRepository
from repositories.login_log import LoginLogRepository

logger = logging.getLogger(__name__)


async def cleanup_login_logs(session, now: datetime | None = None) -> int:
    """Returns the number of deleted login logs (0 on error)."""
    now = now or datetime.now()
    cutoff = now - timedelta(days=config.LOGIN_LOG_RETENTION_DAYS)
    try:
        deleted = await LoginLogRepository.delete_older_than(cutoff, session)
        await session_commit(session)
        logger.info(f"[Log Cleanup] Deleted {deleted} login log(s) older than {cutoff:%Y-%m-%d %H:%M}")
        return deleted
    except SQLAlchemyError as e:
        logger.error(f"[Log Cleanup] Login log cleanup failed: {e}", exc_info=True)
        await session_rollback(session)
        return 0


async def cleanup_audit_logs(session, now: datetime | None = None) -> int:
    """Returns the number of deleted audit logs (0 on error)."""
    now = now or datetime.now()
    cutoff = now - timedelta(days=config.AUDIT_LOG_RETENTION_DAYS)
    try:
        deleted = await AuditLogRepository.delete_older_than(cutoff, session)
        await session_commit(session)
        logger.info(f"[Log Cleanup] Deleted {deleted} audit log(s) older than {cutoff:%Y-%m-%d %H:%M}")
        return deleted
    except SQLAlchemyError as e:
        logger.error(f"[Log Cleanup] Audit log cleanup failed: {e}", exc_info=True)
        await session_rollback(session)
        return 0


async def run_cleanup_cycle() -> tuple[int, int]:
    async with get_db_session() as session:
        login_deleted = await cleanup_login_logs(session)
        audit_deleted = await cleanup_audit_logs(session)
    return login_deleted, audit_deleted


async def log_cleanup_scheduler():
    """Runs cleanup cycles indefinitely. Start it as a background task."""
    interval_seconds = config.LOG_CLEANUP_INTERVAL_HOURS * 3600
    logger.info(
        f"[Log Cleanup] Scheduler started "
        f"(interval: {config.LOG_CLEANUP_INTERVAL_HOURS}h, "
        f"login logs: {config.LOGIN_LOG_RETENTION_DAYS} days, "
        f"audit logs: {config.AUDIT_LOG_RETENTION_DAYS} days)"
    )

    while True:
        try:
            await run_cleanup_cycle()
            await asyncio.sleep(interval_seconds)
        except asyncio.CancelledError:
            logger.info("[Log Cleanup] Scheduler stopped")
            break
        except Exception as e:
            logger.error(f"[Log Cleanup] Scheduler error: {e}", exc_info=True)
            # Wait before retrying on error
            await asyncio.sleep(60)
