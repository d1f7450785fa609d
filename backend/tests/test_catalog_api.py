"""
PalmPay Backend — Catalog API Tests
=====================================

What we test:
    ✅ Product listing shows active products only, sorted by name
    ✅ Money fields are decimal strings
    ✅ Customers round-trip through POST/GET, newest first
    ✅ Service failures map to 500 with the error envelope
"""

from decimal import Decimal

import pytest

from palmpay.exceptions import DatabaseError
from palmpay.models.catalog import Product
from palmpay.services.catalog_service import catalog_service


@pytest.mark.asyncio
async def test_products_active_only_sorted_by_name(client, session_factory):
    async with session_factory() as session:
        session.add_all([
            Product(name="Zucchini", price=Decimal("1.00"), stock=5, active=True),
            Product(name="Apple", price=Decimal("0.50"), stock=5, active=True),
            Product(name="Discontinued", price=Decimal("9.99"), stock=0, active=False),
        ])
        await session.commit()

    response = await client.get("/api/products")

    assert response.status_code == 200
    names = [p["name"] for p in response.json()["products"]]
    assert names == ["Apple", "Zucchini"]


@pytest.mark.asyncio
async def test_create_product_camel_case(client):
    response = await client.post(
        "/api/products",
        json={"name": "Tea", "price": "3.50", "imageUrl": "http://img/tea.png", "stock": 4},
    )

    assert response.status_code == 200
    product = response.json()["product"]
    assert product["price"] == "3.50"
    assert product["imageUrl"] == "http://img/tea.png"
    assert product["active"] is True
    assert product["createdAt"]


@pytest.mark.asyncio
async def test_create_product_missing_name(client):
    response = await client.post("/api/products", json={"price": "1.00"})

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "validation_error"
    assert "name" in body["error"]


@pytest.mark.asyncio
async def test_customers_newest_first(client):
    for name in ("First", "Second"):
        response = await client.post("/api/customers", json={"name": name, "palmId": f"palm-{name}"})
        assert response.status_code == 200

    response = await client.get("/api/customers")

    customers = response.json()["customers"]
    assert [c["name"] for c in customers] == ["Second", "First"]
    assert customers[0]["palmId"] == "palm-Second"


@pytest.mark.asyncio
async def test_database_error_envelope(client, monkeypatch):
    async def broken(db):
        raise DatabaseError(message="Failed to fetch products")

    monkeypatch.setattr(catalog_service, "list_products", broken)

    response = await client.get("/api/products", headers={"X-Request-ID": "req-42"})

    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to fetch products",
        "code": "server_error",
        "request_id": "req-42",
    }
    assert response.headers["X-Request-ID"] == "req-42"
