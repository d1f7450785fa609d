"""
PalmPay Backend — Product & Customer Models
=============================================

What:  ORM models for the `products` and `customers` tables.
Who:   Used by CatalogService and joined into orders by OrderService.

Table Design Rationale:
    - String(36) UUID primary keys: opaque ids, portable across PostgreSQL
      and the SQLite test database
    - price as NUMERIC(10, 2): money is never stored as float
    - products.active: soft "delisting" flag; inactive products stay
      referenced by historical order items but are hidden from the catalog
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, DateTime, Index, Integer, Numeric, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from palmpay.database import Base
from palmpay.models.base import new_id, utcnow


class Product(Base):
    """
    A sellable catalog item.

    Query Patterns:
        - Catalog listing: WHERE active ORDER BY name
    """

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    stock: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )
    active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_products_active_name", "active", "name"),
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}', active={self.active})>"


class Customer(Base):
    """
    A shopper known to the kiosk. `palm_id` links the customer to an
    enrolled palm identity once they have registered one.
    """

    __tablename__ = "customers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    palm_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # Customers are listed newest first
    __table_args__ = (
        Index("idx_customers_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Customer(id={self.id}, name='{self.name}')>"
