"""
PalmPay Backend — Order & OrderItem Models
============================================

What:  ORM models for the `orders` and `order_items` tables.
Who:   Used by OrderService (create, list, complete) and DeviceService
       (next pending order for a kiosk).

Lifecycle:
    1. Created by the POS dashboard with status 'pending' and a target device
    2. Picked up by the kiosk (GET /api/palm/next-order)
    3. Completed by the kiosk after the palm scan (status + completed_at)

    `status` is an open string: whatever the caller sends is stored verbatim.

Invariants:
    - total_amount == Σ item.price × item.quantity, computed once at creation
    - order_items.price is a snapshot of the caller-supplied price and is
      never re-derived from products.price
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from palmpay.database import Base
from palmpay.models.base import new_id, utcnow

ORDER_PENDING = "pending"
ORDER_COMPLETED = "completed"


class Order(Base):
    """
    A kiosk order awaiting (or past) palm payment.

    Query Patterns:
        - Dashboard list: ORDER BY created_at DESC, optional status filter
        - Kiosk poll: WHERE status='pending' AND palm_device_id=:id
          ORDER BY created_at ASC LIMIT 1
    """

    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    # Nullable: walk-in orders have no customer record, only a name
    customer_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("customers.id"), nullable=True
    )
    # Denormalized snapshot shown on the kiosk and searchable from the dashboard
    customer_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=ORDER_PENDING,
        server_default=text("'pending'"),
    )
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    palm_device_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("palm_devices.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    items: Mapped[List["OrderItem"]] = relationship(back_populates="order")
    customer: Mapped[Optional["Customer"]] = relationship()  # noqa: F821
    palm_device: Mapped[Optional["PalmDevice"]] = relationship()  # noqa: F821

    __table_args__ = (
        Index("idx_orders_created_at", created_at.desc()),
        Index("idx_orders_status_device", "status", "palm_device_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Order(id={self.id}, status='{self.status}', "
            f"total_amount={self.total_amount})>"
        )


class OrderItem(Base):
    """One line of an order: product, quantity and the frozen unit price."""

    __tablename__ = "order_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    order_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("orders.id"), nullable=False, index=True
    )
    product_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("products.id"), nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    order: Mapped["Order"] = relationship(back_populates="items")
    product: Mapped["Product"] = relationship()  # noqa: F821

    def __repr__(self) -> str:
        return (
            f"<OrderItem(order_id={self.order_id}, product_id={self.product_id}, "
            f"quantity={self.quantity}, price={self.price})>"
        )
