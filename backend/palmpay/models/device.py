"""
PalmPay Backend — Palm Device Models
======================================

What:  ORM models for registered kiosk scanners and their auth-attempt log.
Who:   Used by DeviceService (registration, bearer lookup, next order) and
       AuditService (device log listing).

Security:
    `api_token` is the device's bearer credential. It is generated
    server-side, unique, and only ever returned by the registration call.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from palmpay.database import Base
from palmpay.models.base import new_id, utcnow


class PalmDevice(Base):
    """A palm-vein kiosk scanner registered with the backend."""

    __tablename__ = "palm_devices"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # 32 random bytes, hex encoded → 64 characters
    api_token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
    )
    # Stamped on every successful bearer authentication
    last_seen_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        # Never include api_token: repr() ends up in logs
        return f"<PalmDevice(id={self.id}, name='{self.name}', active={self.active})>"


class DeviceAuthenticationLog(Base):
    """
    One authentication attempt reported by a kiosk.

    `palm_device_id` is nullable so rows survive device removal and so
    historical rows written before device registration remain valid.
    """

    __tablename__ = "device_authentication_logs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    palm_device_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("palm_devices.id"), nullable=True
    )
    device_type: Mapped[str] = mapped_column(
        String(64), nullable=False, default="palm_scanner"
    )
    location: Mapped[str] = mapped_column(String(255), nullable=False, default="unknown")
    success: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False, default="")
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    palm_device: Mapped[Optional["PalmDevice"]] = relationship()

    __table_args__ = (
        Index("idx_device_auth_logs_timestamp", timestamp.desc()),
    )
