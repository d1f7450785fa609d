"""
PalmPay Backend — Device Bearer Authentication
================================================

What:  FastAPI dependency resolving `Authorization: Bearer <token>` to the
       calling PalmDevice.
Who:   Declared by the kiosk-facing routes (next-order, device auth-log).

Failure modes (all 401):
    - header missing, or scheme other than "Bearer" → "Missing authorization token"
    - token matches no device                        → "Invalid device token"
"""

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from palmpay.database import get_db_session
from palmpay.exceptions import AuthenticationError
from palmpay.models.device import PalmDevice
from palmpay.services.device_service import device_service

BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Return the token part of a Bearer header or raise AuthenticationError."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise AuthenticationError(message="Missing authorization token")
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthenticationError(message="Missing authorization token")
    return token


async def get_authenticated_device(
    authorization: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> PalmDevice:
    token = extract_bearer_token(authorization)
    return await device_service.authenticate(db, token)
