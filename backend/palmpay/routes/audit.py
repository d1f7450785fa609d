"""
PalmPay Backend — Audit Log Route Handlers (v1)
=================================================

Route Inventory:
    GET  /api/v1/users/{user_id}/auth-logs?limit=&offset=
    GET  /api/v1/users/{user_id}/auth-history?limit=&offset=   (alias)
    POST /api/v1/users/{user_id}/auth-logs
    GET  /api/v1/palm/device-logs
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from palmpay.config import settings
from palmpay.database import get_db_session
from palmpay.schemas.common import ErrorResponse
from palmpay.schemas.device import DeviceLogEntry
from palmpay.schemas.user import AuthLogCreate, AuthLogCreated, AuthLogPage
from palmpay.services.audit_service import audit_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Audit"])


@router.get(
    "/users/{user_id}/auth-logs",
    response_model=AuthLogPage,
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="Page through a user's authentication attempts",
)
@router.get(
    "/users/{user_id}/auth-history",
    response_model=AuthLogPage,
    include_in_schema=False,
)
async def list_auth_logs(
    user_id: str,
    limit: int = Query(default=settings.auth_log_default_limit, ge=1, le=settings.auth_log_max_limit),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db_session),
) -> AuthLogPage:
    return await audit_service.list_user_auth_logs(db, user_id, limit=limit, offset=offset)


@router.post(
    "/users/{user_id}/auth-logs",
    response_model=AuthLogCreated,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Record an authentication attempt for a user",
)
async def create_auth_log(
    user_id: str,
    body: AuthLogCreate,
    db: AsyncSession = Depends(get_db_session),
) -> AuthLogCreated:
    log = await audit_service.record_user_auth(db, user_id, body)
    return AuthLogCreated(success=True, log=log)


@router.get(
    "/palm/device-logs",
    response_model=List[DeviceLogEntry],
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="Most recent device authentication attempts",
)
async def list_device_logs(
    db: AsyncSession = Depends(get_db_session),
) -> List[DeviceLogEntry]:
    return await audit_service.list_device_logs(db)
