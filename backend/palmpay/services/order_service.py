"""
PalmPay Backend — Order Service
=================================

What:  Order creation, listing, completion and per-customer history.
Who:   Called by routes/orders.py and routes/devices.py (complete-order);
       DeviceService reuses `order_load_options()` for the kiosk poll.

Orchestration Flow (POST /api/orders):
    ┌──────────┐    ┌─────────────┐    ┌──────────────┐    ┌──────────┐
    │ Validate │───▶│  Compute    │───▶│ Insert order │───▶│ Reload   │
    │ device,  │    │  total from │    │ + items in   │    │ with     │
    │ items    │    │  line items │    │ one flush    │    │ joins    │
    └──────────┘    └─────────────┘    └──────────────┘    └──────────┘

Pricing:
    Line prices are trusted as submitted; nothing is re-priced against the
    catalog. `total_amount` is computed here once and never recomputed.
"""

import logging
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from palmpay.exceptions import DatabaseError, NotFoundError, PalmPayError, ValidationError
from palmpay.models.base import utcnow
from palmpay.models.order import ORDER_COMPLETED, ORDER_PENDING, Order, OrderItem
from palmpay.schemas.order import (
    CompleteOrderRequest,
    OrderCreate,
    OrderItemCreate,
    OrderResponse,
)

logger = logging.getLogger(__name__)


def order_load_options():
    """
    Eager loads for every order returned by the API.

    Async sessions cannot lazy-load, so items→product, customer and
    palm_device are always fetched up front (one SELECT ... IN per relation).
    """
    return (
        selectinload(Order.items).selectinload(OrderItem.product),
        selectinload(Order.customer),
        selectinload(Order.palm_device),
    )


def compute_total(items: Iterable[OrderItemCreate]) -> Decimal:
    """Σ price × quantity over the submitted items."""
    return sum((item.price * item.quantity for item in items), Decimal("0"))


class OrderService:
    """
    Business logic layer for order operations.

    Transaction:
        The order row and its item rows are added to the request's session
        and flushed together; get_db_session commits them as one unit.
    """

    async def _load_order(self, db: AsyncSession, order_id: str) -> Optional[Order]:
        # populate_existing: the order is already in the identity map after
        # the flush, and its relationships must be (re)loaded eagerly
        result = await db.execute(
            select(Order)
            .where(Order.id == order_id)
            .options(*order_load_options())
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create_order(self, db: AsyncSession, data: OrderCreate) -> OrderResponse:
        """
        Create a pending order for a kiosk.

        Raises:
            ValidationError: palmDeviceId missing, or no items (→ 400)
            DatabaseError: insert failed, e.g. unknown device id (→ 500)
        """
        if not data.palm_device_id:
            raise ValidationError(message="Device selection required", field="palmDeviceId")
        if not data.items:
            raise ValidationError(message="Order must contain at least one item", field="items")

        total_amount = compute_total(data.items)

        try:
            order = Order(
                customer_id=data.customer_id,
                customer_name=data.customer_name,
                status=ORDER_PENDING,
                total_amount=total_amount,
                palm_device_id=data.palm_device_id,
                items=[
                    OrderItem(
                        product_id=item.product_id,
                        quantity=item.quantity,
                        price=item.price,
                    )
                    for item in data.items
                ],
            )
            db.add(order)
            await db.flush()
            logger.info(
                "Order %s created for device %s: %d items, total %s",
                order.id,
                data.palm_device_id,
                len(data.items),
                total_amount,
            )

            loaded = await self._load_order(db, order.id)
            return OrderResponse.model_validate(loaded)

        except Exception as e:
            logger.error("Error creating order: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to create order")

    async def list_orders(
        self,
        db: AsyncSession,
        status: Optional[str] = None,
        customer_name: Optional[str] = None,
    ) -> List[OrderResponse]:
        """
        All orders, newest first, optionally filtered.

        Args:
            status: exact match on the stored status string
            customer_name: case-insensitive substring match
        """
        try:
            query = select(Order).options(*order_load_options())
            if status:
                query = query.where(Order.status == status)
            if customer_name:
                query = query.where(Order.customer_name.icontains(customer_name, autoescape=True))
            query = query.order_by(Order.created_at.desc())

            result = await db.execute(query)
            return [OrderResponse.model_validate(o) for o in result.scalars().all()]
        except Exception as e:
            logger.error("Error fetching orders: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to fetch orders")

    async def complete_order(
        self,
        db: AsyncSession,
        order_id: str,
        data: CompleteOrderRequest,
    ) -> OrderResponse:
        """
        Mark an order finished: status (verbatim, default 'completed') and
        completed_at=now. customer_name is overwritten when supplied.

        customer_id is never written here: the kiosk may send an id that has
        no customers row, which would violate the foreign key.

        Raises:
            NotFoundError: unknown order id (→ 404)
        """
        try:
            order = await db.get(Order, order_id)
            if order is None:
                raise NotFoundError(resource="order", resource_id=order_id)

            order.status = data.status or ORDER_COMPLETED
            order.completed_at = utcnow()
            if data.customer_name is not None:
                order.customer_name = data.customer_name
            if data.customer_id is not None:
                logger.debug("Ignoring customerId on completion of order %s", order_id)

            await db.flush()
            logger.info("Order %s completed with status '%s'", order_id, order.status)

            loaded = await self._load_order(db, order_id)
            return OrderResponse.model_validate(loaded)

        except PalmPayError:
            raise
        except Exception as e:
            logger.error("Error completing order %s: %s", order_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to complete order")

    async def list_transactions(self, db: AsyncSession, customer_id: str) -> List[OrderResponse]:
        """A customer's completed orders, most recently completed first."""
        try:
            result = await db.execute(
                select(Order)
                .where(Order.customer_id == customer_id, Order.status == ORDER_COMPLETED)
                .options(*order_load_options())
                .order_by(Order.completed_at.desc())
            )
            return [OrderResponse.model_validate(o) for o in result.scalars().all()]
        except Exception as e:
            logger.error("Error fetching transactions for %s: %s", customer_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to fetch transactions")


# ── Singleton Instance ────────────────────────────────────────────────────
order_service = OrderService()
