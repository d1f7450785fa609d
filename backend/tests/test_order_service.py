"""
PalmPay Backend — Order Service Unit Tests
============================================

What:  Tests for OrderService business logic (create, complete) and totals.
How:   Uses mock DB sessions (no real DB); flush is faked to assign the
       primary keys and timestamps a real INSERT would produce.

What we test:
    ✅ totalAmount = Σ price × quantity, exact decimal arithmetic
    ✅ Missing palmDeviceId or empty items → ValidationError, nothing added
    ✅ Insert failure surfaces as DatabaseError
    ✅ complete-order defaults status, stamps completedAt, ignores customerId
    ✅ Unknown order → NotFoundError
"""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from palmpay.exceptions import DatabaseError, NotFoundError, ValidationError
from palmpay.models.base import new_id, utcnow
from palmpay.models.order import Order
from palmpay.schemas.order import CompleteOrderRequest, OrderCreate, OrderItemCreate
from palmpay.services.order_service import OrderService, compute_total


def stamp_on_flush(session):
    """Make session.flush assign ids/created_at to every added Order and its items."""

    async def flush():
        for call in session.add.call_args_list:
            order = call.args[0]
            order.id = order.id or new_id()
            order.created_at = order.created_at or utcnow()
            for item in order.items:
                item.id = item.id or new_id()
                item.order_id = order.id

    session.flush = AsyncMock(side_effect=flush)

    def returns_added(*args, **kwargs):
        result = MagicMock()
        result.scalar_one_or_none.return_value = session.add.call_args.args[0]
        return result

    session.execute = AsyncMock(side_effect=returns_added)


def order_payload(**overrides):
    data = {
        "customerName": "Alice",
        "palmDeviceId": "device-1",
        "items": [
            {"productId": "p-coffee", "quantity": 2, "price": "2.50"},
            {"productId": "p-sandwich", "quantity": 1, "price": "7.00"},
        ],
    }
    data.update(overrides)
    return OrderCreate.model_validate(data)


class TestComputeTotal:

    def test_sum_of_lines(self):
        items = [
            OrderItemCreate(product_id="a", quantity=2, price=Decimal("2.50")),
            OrderItemCreate(product_id="b", quantity=1, price=Decimal("7.00")),
        ]
        assert compute_total(items) == Decimal("12.00")

    def test_mixed_basket(self):
        items = [
            OrderItemCreate(product_id="a", quantity=2, price=Decimal("3.50")),
            OrderItemCreate(product_id="b", quantity=1, price=Decimal("5.00")),
        ]
        assert compute_total(items) == Decimal("12.00")

    def test_no_float_drift(self):
        items = [OrderItemCreate(product_id="a", quantity=3, price=Decimal("0.10"))]
        assert compute_total(items) == Decimal("0.30")

    def test_empty_is_zero(self):
        assert compute_total([]) == Decimal("0")


class TestCreateOrder:

    def setup_method(self):
        self.service = OrderService()

    @pytest.mark.asyncio
    async def test_create_order_success(self, mock_db_session):
        stamp_on_flush(mock_db_session)

        result = await self.service.create_order(mock_db_session, order_payload())

        assert result.status == "pending"
        assert result.total_amount == Decimal("12.00")
        assert result.palm_device_id == "device-1"
        assert [i.quantity for i in result.items] == [2, 1]
        mock_db_session.add.assert_called_once()
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_device_rejected(self, mock_db_session):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_order(mock_db_session, order_payload(palmDeviceId=None))

        assert exc_info.value.message == "Device selection required"
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_items_rejected(self, mock_db_session):
        with pytest.raises(ValidationError):
            await self.service.create_order(mock_db_session, order_payload(items=[]))
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_insert_failure_is_database_error(self, mock_db_session):
        mock_db_session.flush = AsyncMock(side_effect=RuntimeError("FK violation"))

        with pytest.raises(DatabaseError) as exc_info:
            await self.service.create_order(mock_db_session, order_payload())
        assert exc_info.value.message == "Failed to create order"


class TestCompleteOrder:

    def setup_method(self):
        self.service = OrderService()

    def _pending_order(self):
        return Order(
            id="order-1",
            customer_id=None,
            customer_name="Alice",
            status="pending",
            total_amount=Decimal("12.00"),
            palm_device_id="device-1",
            created_at=utcnow(),
            items=[],
        )

    def _wire(self, session, order):
        session.get = AsyncMock(return_value=order)
        result = MagicMock()
        result.scalar_one_or_none.return_value = order
        session.execute = AsyncMock(return_value=result)

    @pytest.mark.asyncio
    async def test_defaults_to_completed(self, mock_db_session):
        order = self._pending_order()
        self._wire(mock_db_session, order)

        result = await self.service.complete_order(mock_db_session, "order-1", CompleteOrderRequest())

        assert result.status == "completed"
        assert result.completed_at is not None
        assert result.customer_name == "Alice"

    @pytest.mark.asyncio
    async def test_status_and_name_are_stored_verbatim(self, mock_db_session):
        order = self._pending_order()
        self._wire(mock_db_session, order)

        body = CompleteOrderRequest(status="refunded", customer_name="Bob")
        result = await self.service.complete_order(mock_db_session, "order-1", body)

        assert result.status == "refunded"
        assert result.customer_name == "Bob"

    @pytest.mark.asyncio
    async def test_customer_id_is_ignored(self, mock_db_session):
        order = self._pending_order()
        self._wire(mock_db_session, order)

        body = CompleteOrderRequest(customer_id="no-such-customer")
        await self.service.complete_order(mock_db_session, "order-1", body)

        assert order.customer_id is None

    @pytest.mark.asyncio
    async def test_unknown_order(self, mock_db_session):
        mock_db_session.get = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError):
            await self.service.complete_order(mock_db_session, "missing", CompleteOrderRequest())
        mock_db_session.flush.assert_not_awaited()
