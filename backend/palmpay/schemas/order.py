"""
PalmPay Backend — Order Schemas
=================================

What:  Contracts for order creation, listing, completion and the kiosk poll.

Pricing:
    `OrderItemCreate.price` is trusted as sent (string or number) and frozen
    into the order item. `totalAmount` in responses is the stored total
    computed once at creation.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from palmpay.schemas.catalog import CustomerResponse, ProductResponse
from palmpay.schemas.common import ApiModel
from palmpay.schemas.device import DeviceResponse


class OrderItemCreate(ApiModel):
    product_id: str
    quantity: int
    price: Decimal = Field(description="Unit price at order time")


class OrderCreate(ApiModel):
    """
    Presence of items and palmDeviceId is checked by OrderService so the
    client gets a descriptive 400 ("Device selection required").
    """
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    items: List[OrderItemCreate] = Field(default_factory=list)
    palm_device_id: Optional[str] = None


class CompleteOrderRequest(ApiModel):
    status: Optional[str] = Field(
        default=None,
        description="Stored verbatim; defaults to 'completed' when omitted",
    )
    customer_name: Optional[str] = None
    customer_id: Optional[str] = Field(
        default=None,
        description="Accepted for compatibility; not written to the order",
    )


class OrderItemResponse(ApiModel):
    id: str
    order_id: str
    product_id: str
    quantity: int
    price: Decimal
    product: Optional[ProductResponse] = None


class OrderResponse(ApiModel):
    id: str
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    status: str
    total_amount: Decimal
    palm_device_id: Optional[str] = None
    created_at: datetime
    completed_at: Optional[datetime] = None
    items: List[OrderItemResponse] = Field(default_factory=list)
    customer: Optional[CustomerResponse] = None
    palm_device: Optional[DeviceResponse] = None


class OrderEnvelope(ApiModel):
    order: Optional[OrderResponse] = None


class OrderListResponse(ApiModel):
    orders: List[OrderResponse]


class CompleteOrderResponse(ApiModel):
    order: OrderResponse
    message: str = "Order completed"


class TransactionListResponse(ApiModel):
    transactions: List[OrderResponse]
