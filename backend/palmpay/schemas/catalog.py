"""
PalmPay Backend — Product & Customer Schemas
==============================================

What:  Request/response contracts for /api/products and /api/customers.
Note:  No server-side validation of price or stock beyond type coercion;
       the catalog is maintained by trusted POS operators.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from palmpay.schemas.common import ApiModel


class ProductCreate(ApiModel):
    name: str = Field(description="Display name")
    description: Optional[str] = None
    price: Decimal = Field(description="Unit price, e.g. \"3.50\"")
    image_url: Optional[str] = None
    stock: int = 0


class ProductResponse(ApiModel):
    id: str
    name: str
    description: Optional[str] = None
    price: Decimal
    image_url: Optional[str] = None
    stock: int
    active: bool
    created_at: datetime


class ProductListResponse(ApiModel):
    products: List[ProductResponse]


class ProductEnvelope(ApiModel):
    product: ProductResponse


class CustomerCreate(ApiModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    palm_id: Optional[str] = None


class CustomerResponse(ApiModel):
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    palm_id: Optional[str] = None
    created_at: datetime


class CustomerListResponse(ApiModel):
    customers: List[CustomerResponse]


class CustomerEnvelope(ApiModel):
    customer: CustomerResponse
