"""
PalmPay Backend — Audit Log Service
=====================================

What:  Read (and record) authentication audit trails.
Who:   Called by routes/audit.py.

    - Per-user AuthenticationLog pages (limit/offset, newest first)
    - Global DeviceAuthenticationLog feed (most recent N, flattened with
      the owning device's name and location)
"""

import logging
from typing import List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from palmpay.config import settings
from palmpay.exceptions import DatabaseError, NotFoundError, PalmPayError
from palmpay.models.device import DeviceAuthenticationLog
from palmpay.models.user import AuthenticationLog, User
from palmpay.schemas.device import DeviceLogEntry
from palmpay.schemas.user import AuthLogCreate, AuthLogPage, AuthLogResponse

logger = logging.getLogger(__name__)


class AuditService:

    async def list_user_auth_logs(
        self,
        db: AsyncSession,
        user_id: str,
        limit: int = 50,
        offset: int = 0,
    ) -> AuthLogPage:
        """
        One page of a user's auth attempts, newest first.

        `total` is a COUNT over all of the user's rows, so a client can
        tell whether more pages exist.
        """
        try:
            result = await db.execute(
                select(AuthenticationLog)
                .where(AuthenticationLog.user_id == user_id)
                .order_by(AuthenticationLog.timestamp.desc())
                .limit(limit)
                .offset(offset)
            )
            logs = [AuthLogResponse.model_validate(row) for row in result.scalars().all()]

            count_result = await db.execute(
                select(func.count(AuthenticationLog.id)).where(AuthenticationLog.user_id == user_id)
            )
            total = count_result.scalar() or 0

            return AuthLogPage(logs=logs, total=total, limit=limit, offset=offset)
        except Exception as e:
            logger.error("Error fetching auth logs for %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to fetch authentication logs")

    async def record_user_auth(
        self, db: AsyncSession, user_id: str, data: AuthLogCreate
    ) -> AuthLogResponse:
        try:
            if await db.get(User, user_id) is None:
                raise NotFoundError(message="User not found", resource="user", resource_id=user_id)

            log = AuthenticationLog(
                user_id=user_id,
                success=data.success,
                method=data.method or "palm",
                device_id=data.device_id,
                reason=data.reason,
            )
            db.add(log)
            await db.flush()
            return AuthLogResponse.model_validate(log)
        except PalmPayError:
            raise
        except Exception as e:
            logger.error("Error writing auth log for %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to create authentication log")

    async def list_device_logs(self, db: AsyncSession) -> List[DeviceLogEntry]:
        """Most recent `settings.device_log_limit` device auth attempts."""
        try:
            result = await db.execute(
                select(DeviceAuthenticationLog)
                .options(selectinload(DeviceAuthenticationLog.palm_device))
                .order_by(DeviceAuthenticationLog.timestamp.desc())
                .limit(settings.device_log_limit)
            )
            entries = []
            for row in result.scalars().all():
                entry = DeviceLogEntry.model_validate(row)
                if row.palm_device is not None:
                    entry.device_name = row.palm_device.name
                    entry.device_location = row.palm_device.location
                entries.append(entry)
            return entries
        except Exception as e:
            logger.error("Error fetching device logs: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to fetch device logs")


# ── Singleton Instance ────────────────────────────────────────────────────
audit_service = AuditService()
