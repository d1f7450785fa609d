"""
PalmPay Backend — Palm Device Route Handlers
==============================================

What:  Device registration and management, plus the two kiosk-facing
       endpoints that require a device bearer token.

Route Inventory:
    GET   /api/palm/devices            (dashboard; no tokens in output)
    GET   /api/palm-devices            (same listing, legacy path)
    PATCH /api/palm/devices/{id}
    POST  /api/palm/register           (only response that includes apiToken)
    GET   /api/palm/next-order         [Bearer]
    POST  /api/palm-devices/auth-log   [Bearer]
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from palmpay.auth import get_authenticated_device
from palmpay.database import get_db_session
from palmpay.models.device import PalmDevice
from palmpay.schemas.common import ErrorResponse
from palmpay.schemas.device import (
    DeviceAuthLogCreate,
    DeviceAuthLogCreated,
    DeviceEnvelope,
    DeviceListResponse,
    DeviceRegister,
    DeviceUpdate,
    RegisteredDeviceEnvelope,
)
from palmpay.schemas.order import OrderEnvelope
from palmpay.services.device_service import device_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Palm Devices"])

_UNAUTHORIZED = {401: {"description": "Missing or invalid bearer token", "model": ErrorResponse}}


@router.get(
    "/api/palm/devices",
    response_model=DeviceListResponse,
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List registered devices",
)
@router.get(
    "/api/palm-devices",
    response_model=DeviceListResponse,
    include_in_schema=False,
)
async def list_devices(
    db: AsyncSession = Depends(get_db_session),
) -> DeviceListResponse:
    devices = await device_service.list_devices(db)
    return DeviceListResponse(devices=devices)


@router.patch(
    "/api/palm/devices/{device_id}",
    response_model=DeviceEnvelope,
    responses={
        404: {"description": "Device not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Rename or relocate a device",
)
async def update_device(
    device_id: str,
    body: DeviceUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> DeviceEnvelope:
    device = await device_service.update_device(db, device_id, body)
    return DeviceEnvelope(device=device)


@router.post(
    "/api/palm/register",
    response_model=RegisteredDeviceEnvelope,
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="Register a kiosk and issue its bearer token",
    description=(
        "The response contains the device's apiToken. It is never returned "
        "again; the kiosk must store it."
    ),
)
async def register_device(
    body: DeviceRegister,
    db: AsyncSession = Depends(get_db_session),
) -> RegisteredDeviceEnvelope:
    device = await device_service.register_device(db, body)
    return RegisteredDeviceEnvelope(device=device)


@router.get(
    "/api/palm/next-order",
    response_model=OrderEnvelope,
    responses={**_UNAUTHORIZED, 500: {"description": "Server error", "model": ErrorResponse}},
    summary="Oldest pending order for the calling kiosk",
    description=(
        "Returns {order: null} when nothing is pending. The order is not "
        "reserved: polling again before completing it returns it again."
    ),
)
async def next_order(
    device: PalmDevice = Depends(get_authenticated_device),
    db: AsyncSession = Depends(get_db_session),
) -> OrderEnvelope:
    order = await device_service.next_pending_order(db, device)
    return OrderEnvelope(order=order)


@router.post(
    "/api/palm-devices/auth-log",
    response_model=DeviceAuthLogCreated,
    responses={**_UNAUTHORIZED, 500: {"description": "Server error", "model": ErrorResponse}},
    summary="Record an authentication attempt made on the calling kiosk",
)
async def create_device_auth_log(
    body: Optional[DeviceAuthLogCreate] = None,
    device: PalmDevice = Depends(get_authenticated_device),
    db: AsyncSession = Depends(get_db_session),
) -> DeviceAuthLogCreated:
    log = await device_service.record_auth_attempt(db, device, body or DeviceAuthLogCreate())
    return DeviceAuthLogCreated(success=True, log=log)
