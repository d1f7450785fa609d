"""
PalmPay Backend — Palm Device Schemas
=======================================

What:  Contracts for device registration, listing, update and the
       device-scoped authentication log.

Security:
    `DeviceResponse` deliberately has no `api_token` field, so listing and
    update responses can never leak a bearer credential. Only
    `RegisteredDeviceResponse` (returned once, by registration) carries it.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from palmpay.schemas.common import ApiModel


class DeviceRegister(ApiModel):
    name: str = Field(description="Human-readable kiosk name")
    location: Optional[str] = None


class DeviceUpdate(ApiModel):
    """Partial update: only fields present in the body are written."""
    name: Optional[str] = None
    location: Optional[str] = None


class DeviceResponse(ApiModel):
    id: str
    name: str
    location: Optional[str] = None
    active: bool
    last_seen_at: Optional[datetime] = None
    created_at: datetime


class RegisteredDeviceResponse(DeviceResponse):
    api_token: str = Field(description="Bearer token; shown only at registration")


class DeviceListResponse(ApiModel):
    devices: List[DeviceResponse]


class DeviceEnvelope(ApiModel):
    device: DeviceResponse


class RegisteredDeviceEnvelope(ApiModel):
    device: RegisteredDeviceResponse


class DeviceAuthLogCreate(ApiModel):
    """Absent fields fall back to the defaults applied by DeviceService."""
    device_type: Optional[str] = None
    location: Optional[str] = None
    success: Optional[bool] = None
    reason: Optional[str] = None


class DeviceAuthLogResponse(ApiModel):
    id: str
    palm_device_id: Optional[str] = None
    device_type: str
    location: str
    success: bool
    reason: str
    timestamp: datetime


class DeviceAuthLogCreated(ApiModel):
    success: bool = True
    log: DeviceAuthLogResponse


class DeviceLogEntry(DeviceAuthLogResponse):
    """A device log row flattened with its owning device's name/location."""
    device_name: Optional[str] = None
    device_location: Optional[str] = None
