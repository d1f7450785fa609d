"""
PalmPay Backend — ORM Models
==============================

Importing this package registers every model with `Base.metadata`, which
Alembic (--autogenerate) and the test-suite (create_all) rely on. Relationships
refer to each other by class name, so all modules must be imported before the
first query configures the mappers.
"""

from palmpay.models.catalog import Customer, Product
from palmpay.models.device import DeviceAuthenticationLog, PalmDevice
from palmpay.models.order import Order, OrderItem
from palmpay.models.user import AuthenticationLog, Card, PalmTemplate, User

__all__ = [
    "AuthenticationLog",
    "Card",
    "Customer",
    "DeviceAuthenticationLog",
    "Order",
    "OrderItem",
    "PalmDevice",
    "PalmTemplate",
    "Product",
    "User",
]
