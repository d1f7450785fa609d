"""
PalmPay Backend — Catalog Service
===================================

What:  Product and customer CRUD.
Who:   Called by routes/catalog.py.

Error Handling Strategy:
    Any failure is logged with its stack trace and re-raised as
    DatabaseError carrying a generic per-operation message
    ("Failed to fetch products"), which the global handler returns as 500.
"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from palmpay.exceptions import DatabaseError
from palmpay.models.catalog import Customer, Product
from palmpay.schemas.catalog import (
    CustomerCreate,
    CustomerResponse,
    ProductCreate,
    ProductResponse,
)

logger = logging.getLogger(__name__)


class CatalogService:
    """Stateless; every call receives the request's session."""

    async def list_products(self, db: AsyncSession) -> List[ProductResponse]:
        """
        Active products only, sorted by name.

        Query plan:
            SELECT * FROM products WHERE active ORDER BY name
            → idx_products_active_name
        """
        try:
            result = await db.execute(
                select(Product)
                .where(Product.active.is_(True))
                .order_by(Product.name.asc())
            )
            return [ProductResponse.model_validate(p) for p in result.scalars().all()]
        except Exception as e:
            logger.error("Error fetching products: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to fetch products")

    async def create_product(self, db: AsyncSession, data: ProductCreate) -> ProductResponse:
        try:
            product = Product(
                name=data.name,
                description=data.description,
                price=data.price,
                image_url=data.image_url,
                stock=data.stock,
            )
            db.add(product)
            await db.flush()
            logger.info("Product created: %s (%s)", product.id, product.name)
            return ProductResponse.model_validate(product)
        except Exception as e:
            logger.error("Error creating product: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to create product")

    async def list_customers(self, db: AsyncSession) -> List[CustomerResponse]:
        """All customers, most recently created first."""
        try:
            result = await db.execute(
                select(Customer).order_by(Customer.created_at.desc())
            )
            return [CustomerResponse.model_validate(c) for c in result.scalars().all()]
        except Exception as e:
            logger.error("Error fetching customers: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to fetch customers")

    async def create_customer(self, db: AsyncSession, data: CustomerCreate) -> CustomerResponse:
        try:
            customer = Customer(
                name=data.name,
                email=data.email,
                phone=data.phone,
                palm_id=data.palm_id,
            )
            db.add(customer)
            await db.flush()
            logger.info("Customer created: %s", customer.id)
            return CustomerResponse.model_validate(customer)
        except Exception as e:
            logger.error("Error creating customer: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to create customer")


# ── Singleton Instance ────────────────────────────────────────────────────
catalog_service = CatalogService()
