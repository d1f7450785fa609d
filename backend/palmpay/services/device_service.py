"""
PalmPay Backend — Palm Device Service
=======================================

What:  Kiosk registration, bearer-token lookup, the kiosk's "next order"
       poll, and the device-scoped authentication log.
Who:   Called by routes/devices.py and the bearer-auth dependency (auth.py).

Token Model:
    Registration generates 32 random bytes (secrets.token_hex → 64 hex
    chars) and stores them as palm_devices.api_token (UNIQUE). The raw token
    appears in the registration response and nowhere else. Authentication
    is an exact-match lookup on that column.

Known Race (next pending order):
    The poll is a plain read; nothing marks the order as taken. Two polls
    that arrive before the kiosk calls complete-order both receive the same
    order. Orders are device-scoped, so this only happens when one device
    polls concurrently with itself.
"""

import logging
import secrets
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from palmpay.exceptions import AuthenticationError, DatabaseError, NotFoundError, PalmPayError
from palmpay.models.base import utcnow
from palmpay.models.device import DeviceAuthenticationLog, PalmDevice
from palmpay.models.order import ORDER_PENDING, Order
from palmpay.schemas.device import (
    DeviceAuthLogCreate,
    DeviceAuthLogResponse,
    DeviceRegister,
    DeviceResponse,
    DeviceUpdate,
    RegisteredDeviceResponse,
)
from palmpay.schemas.order import OrderResponse
from palmpay.services.order_service import order_load_options

logger = logging.getLogger(__name__)

# Bytes of entropy in a device token (hex doubles the length)
API_TOKEN_BYTES = 32


def generate_api_token() -> str:
    return secrets.token_hex(API_TOKEN_BYTES)


class DeviceService:
    """Business logic for palm devices."""

    async def register_device(
        self, db: AsyncSession, data: DeviceRegister
    ) -> RegisteredDeviceResponse:
        """Create a device with a fresh bearer token and return it, token included."""
        try:
            device = PalmDevice(
                name=data.name,
                location=data.location,
                api_token=generate_api_token(),
            )
            db.add(device)
            await db.flush()
            logger.info("Palm device registered: %s (%s)", device.id, device.name)
            return RegisteredDeviceResponse.model_validate(device)
        except Exception as e:
            logger.error("Error registering device: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to register device")

    async def list_devices(self, db: AsyncSession) -> List[DeviceResponse]:
        """All devices, newest first, without their tokens."""
        try:
            result = await db.execute(
                select(PalmDevice).order_by(PalmDevice.created_at.desc())
            )
            return [DeviceResponse.model_validate(d) for d in result.scalars().all()]
        except Exception as e:
            logger.error("Error fetching devices: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to fetch devices")

    async def update_device(
        self, db: AsyncSession, device_id: str, data: DeviceUpdate
    ) -> DeviceResponse:
        """Partial update of name/location; fields absent from the body are untouched."""
        try:
            device = await db.get(PalmDevice, device_id)
            if device is None:
                raise NotFoundError(resource="device", resource_id=device_id)

            changes = data.model_dump(exclude_unset=True)
            for field in ("name", "location"):
                if field in changes:
                    setattr(device, field, changes[field])

            await db.flush()
            logger.info("Palm device %s updated: %s", device_id, sorted(changes))
            return DeviceResponse.model_validate(device)
        except PalmPayError:
            raise
        except Exception as e:
            logger.error("Error updating device %s: %s", device_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to update device")

    async def authenticate(self, db: AsyncSession, token: str) -> PalmDevice:
        """
        Resolve a bearer token to its device and stamp last_seen_at.

        Raises:
            AuthenticationError: no device holds this token (→ 401)
        """
        try:
            result = await db.execute(
                select(PalmDevice).where(PalmDevice.api_token == token)
            )
            device = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Error looking up device token: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to authenticate device")

        if device is None:
            raise AuthenticationError(message="Invalid device token")

        device.last_seen_at = utcnow()
        return device

    async def next_pending_order(
        self, db: AsyncSession, device: PalmDevice
    ) -> Optional[OrderResponse]:
        """
        Oldest pending order assigned to `device`, or None.

        Query plan:
            SELECT * FROM orders WHERE status='pending' AND palm_device_id=:id
            ORDER BY created_at ASC LIMIT 1
            → idx_orders_status_device
        """
        try:
            result = await db.execute(
                select(Order)
                .where(Order.status == ORDER_PENDING, Order.palm_device_id == device.id)
                .options(*order_load_options())
                .order_by(Order.created_at.asc())
                .limit(1)
            )
            order = result.scalar_one_or_none()
            return OrderResponse.model_validate(order) if order else None
        except Exception as e:
            logger.error("Error fetching next order for %s: %s", device.id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to fetch next order")

    async def record_auth_attempt(
        self,
        db: AsyncSession,
        device: PalmDevice,
        data: DeviceAuthLogCreate,
    ) -> DeviceAuthLogResponse:
        """Write one DeviceAuthenticationLog row, defaulting absent fields."""
        try:
            log = DeviceAuthenticationLog(
                palm_device_id=device.id,
                device_type=data.device_type or "palm_scanner",
                location=data.location or device.location or "unknown",
                success=bool(data.success),
                reason=data.reason or "",
            )
            db.add(log)
            await db.flush()
            logger.info(
                "Device %s auth attempt logged: success=%s", device.id, log.success
            )
            return DeviceAuthLogResponse.model_validate(log)
        except Exception as e:
            logger.error("Error writing device auth log: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to create auth log")


# ── Singleton Instance ────────────────────────────────────────────────────
device_service = DeviceService()
