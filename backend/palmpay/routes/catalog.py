"""
PalmPay Backend — Catalog Route Handlers
==========================================

What:  GET/POST /api/products and GET/POST /api/customers.
Who:   Called by the POS dashboard.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from palmpay.database import get_db_session
from palmpay.schemas.catalog import (
    CustomerCreate,
    CustomerEnvelope,
    CustomerListResponse,
    ProductCreate,
    ProductEnvelope,
    ProductListResponse,
)
from palmpay.schemas.common import ErrorResponse
from palmpay.services.catalog_service import catalog_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Catalog"])


@router.get(
    "/products",
    response_model=ProductListResponse,
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List active products",
    description="Returns every product whose active flag is set, sorted by name.",
)
async def list_products(
    db: AsyncSession = Depends(get_db_session),
) -> ProductListResponse:
    products = await catalog_service.list_products(db)
    return ProductListResponse(products=products)


@router.post(
    "/products",
    response_model=ProductEnvelope,
    responses={
        400: {"description": "Missing required field", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a product",
)
async def create_product(
    body: ProductCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ProductEnvelope:
    product = await catalog_service.create_product(db, body)
    return ProductEnvelope(product=product)


@router.get(
    "/customers",
    response_model=CustomerListResponse,
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List customers, newest first",
)
async def list_customers(
    db: AsyncSession = Depends(get_db_session),
) -> CustomerListResponse:
    customers = await catalog_service.list_customers(db)
    return CustomerListResponse(customers=customers)


@router.post(
    "/customers",
    response_model=CustomerEnvelope,
    responses={
        400: {"description": "Missing required field", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a customer",
)
async def create_customer(
    body: CustomerCreate,
    db: AsyncSession = Depends(get_db_session),
) -> CustomerEnvelope:
    customer = await catalog_service.create_customer(db, body)
    return CustomerEnvelope(customer=customer)
