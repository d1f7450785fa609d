"""
PalmPay Backend — Order Route Handlers
========================================

What:  Order creation and listing for the POS dashboard, completion for the
       kiosk, and the completed-order history for the iOS companion app.

Route Inventory:
    GET  /api/orders?status=&customerName=
    POST /api/orders
    POST /api/palm/complete-order/{order_id}
    GET  /api/transactions/{customer_id}
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from palmpay.database import get_db_session
from palmpay.schemas.common import ErrorResponse
from palmpay.schemas.order import (
    CompleteOrderRequest,
    CompleteOrderResponse,
    OrderCreate,
    OrderEnvelope,
    OrderListResponse,
    TransactionListResponse,
)
from palmpay.services.order_service import order_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Orders"])


@router.get(
    "/api/orders",
    response_model=OrderListResponse,
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List orders, newest first",
    description=(
        "Every order with its items (and their products) and customer. "
        "Filter by exact status and/or a case-insensitive substring of customerName."
    ),
)
async def list_orders(
    status: Optional[str] = Query(default=None, description="Exact status, e.g. 'pending'"),
    customer_name: Optional[str] = Query(
        default=None,
        alias="customerName",
        description="Case-insensitive substring of the customer name",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> OrderListResponse:
    orders = await order_service.list_orders(db, status=status, customer_name=customer_name)
    return OrderListResponse(orders=orders)


@router.post(
    "/api/orders",
    response_model=OrderEnvelope,
    responses={
        400: {"description": "Missing device selection or items", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create an order for a kiosk",
    description=(
        "Creates a pending order routed to `palmDeviceId`. totalAmount is the sum "
        "of price × quantity over the submitted items; prices are stored as sent."
    ),
)
async def create_order(
    body: OrderCreate,
    db: AsyncSession = Depends(get_db_session),
) -> OrderEnvelope:
    order = await order_service.create_order(db, body)
    return OrderEnvelope(order=order)


@router.post(
    "/api/palm/complete-order/{order_id}",
    response_model=CompleteOrderResponse,
    responses={
        404: {"description": "Order not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Complete an order after palm payment",
)
async def complete_order(
    order_id: str,
    body: Optional[CompleteOrderRequest] = None,
    db: AsyncSession = Depends(get_db_session),
) -> CompleteOrderResponse:
    order = await order_service.complete_order(db, order_id, body or CompleteOrderRequest())
    return CompleteOrderResponse(order=order, message="Order completed")


@router.get(
    "/api/transactions/{customer_id}",
    response_model=TransactionListResponse,
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="A customer's completed orders",
)
async def list_transactions(
    customer_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> TransactionListResponse:
    transactions = await order_service.list_transactions(db, customer_id)
    return TransactionListResponse(transactions=transactions)
