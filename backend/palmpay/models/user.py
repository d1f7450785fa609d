"""
PalmPay Backend — User, Card, Palm Template & Auth Log Models
===============================================================

What:  ORM models for palm-pay account holders and everything they own.
Who:   Used by UserService, PalmService and AuditService.

Ownership:
    User ──┬── Card               (payment cards)
           ├── PalmTemplate       (biometric feature blobs per vendor/version)
           └── AuthenticationLog  (per-user auth attempts)

    No ON DELETE CASCADE is configured. Deleting a user means deleting its
    cards, palm templates and auth logs first (UserService.delete_user).
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from palmpay.database import Base
from palmpay.models.base import new_id, utcnow

DEFAULT_SDK_VENDOR = "veinshine"
DEFAULT_FEATURE_VERSION = "1.0"


class User(Base):
    """A palm-pay account holder."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    cards: Mapped[List["Card"]] = relationship(back_populates="user")
    palm_templates: Mapped[List["PalmTemplate"]] = relationship(back_populates="user")

    __table_args__ = (
        Index("idx_users_display_name", "display_name"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, display_name='{self.display_name}')>"


class Card(Base):
    """A payment card on file. Only the last four digits are stored."""

    __tablename__ = "cards"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )
    cardholder_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    last4: Mapped[str] = mapped_column(String(4), nullable=False)
    brand: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    exp_month: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    exp_year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    user: Mapped["User"] = relationship(back_populates="cards")


class PalmTemplate(Base):
    """
    Biometric feature vectors for one user, produced by a vendor SDK.

    The four blobs (palmprint and palm vein, for each hand) are opaque to
    the server: matching happens on the client against the templates
    returned by /api/v1/palm/verify.
    """

    __tablename__ = "palm_templates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )
    sdk_vendor: Mapped[str] = mapped_column(
        String(64), nullable=False, default=DEFAULT_SDK_VENDOR
    )
    feature_version: Mapped[str] = mapped_column(
        String(32), nullable=False, default=DEFAULT_FEATURE_VERSION
    )
    left_palmprint: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    left_palmvein: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    right_palmprint: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    right_palmvein: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    user: Mapped["User"] = relationship(back_populates="palm_templates")

    # Verification scans every active template of one vendor/version
    __table_args__ = (
        Index("idx_palm_templates_vendor_version", "sdk_vendor", "feature_version", "active"),
    )


class AuthenticationLog(Base):
    """One authentication attempt for a user (palm scan, card fallback, ...)."""

    __tablename__ = "authentication_logs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False
    )
    success: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    method: Mapped[str] = mapped_column(String(32), nullable=False, default="palm")
    device_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_auth_logs_user_timestamp", "user_id", timestamp.desc()),
    )
