"""
PalmPay Backend — Order & Kiosk Flow API Tests
================================================

What we test:
    ✅ Create → poll → complete, end to end
    ✅ totalAmount is computed server-side ("12.00")
    ✅ Order creation without a device is rejected and writes nothing
    ✅ next-order is scoped to the calling device and is not reserved
    ✅ Listing filters by status and customerName substring
    ✅ Transactions list only a customer's completed orders
"""

import pytest
from sqlalchemy import func, select

from palmpay.models.order import Order


def order_body(device, products, **overrides):
    coffee, sandwich = products
    body = {
        "customerName": "Alice Smith",
        "palmDeviceId": device["id"],
        "items": [
            {"productId": coffee["id"], "quantity": 2, "price": "2.50"},
            {"productId": sandwich["id"], "quantity": 1, "price": "7.00"},
        ],
    }
    body.update(overrides)
    return body


@pytest.mark.asyncio
async def test_create_order_total_and_joins(client, device, products):
    response = await client.post("/api/orders", json=order_body(device, products))

    assert response.status_code == 200
    order = response.json()["order"]
    assert order["status"] == "pending"
    assert order["totalAmount"] == "12.00"
    assert order["palmDeviceId"] == device["id"]
    assert {item["product"]["name"] for item in order["items"]} == {"Coffee", "Sandwich"}
    assert "apiToken" not in order["palmDevice"]


@pytest.mark.asyncio
async def test_order_requires_device(client, products, session_factory):
    body = {
        "customerName": "Alice",
        "items": [{"productId": products[0]["id"], "quantity": 1, "price": "2.50"}],
    }

    response = await client.post("/api/orders", json=body)

    assert response.status_code == 400
    assert response.json()["error"] == "Device selection required"
    async with session_factory() as session:
        assert await session.scalar(select(func.count(Order.id))) == 0


@pytest.mark.asyncio
async def test_order_requires_items(client, device):
    response = await client.post(
        "/api/orders",
        json={"customerName": "Alice", "palmDeviceId": device["id"], "items": []},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_kiosk_flow(client, device, device_headers, products):
    created = (await client.post("/api/orders", json=order_body(device, products))).json()["order"]

    poll = await client.get("/api/palm/next-order", headers=device_headers)
    assert poll.status_code == 200
    assert poll.json()["order"]["id"] == created["id"]

    # Not reserved: polling again returns the same order
    again = await client.get("/api/palm/next-order", headers=device_headers)
    assert again.json()["order"]["id"] == created["id"]

    done = await client.post(
        f"/api/palm/complete-order/{created['id']}",
        json={"status": "completed", "customerName": "Alice S."},
    )
    assert done.status_code == 200
    completed = done.json()["order"]
    assert completed["status"] == "completed"
    assert completed["completedAt"] is not None
    assert completed["customerName"] == "Alice S."
    assert done.json()["message"]

    empty = await client.get("/api/palm/next-order", headers=device_headers)
    assert empty.json() == {"order": None}


@pytest.mark.asyncio
async def test_next_order_oldest_first(client, device, device_headers, products):
    first = (await client.post("/api/orders", json=order_body(device, products, customerName="A"))).json()
    await client.post("/api/orders", json=order_body(device, products, customerName="B"))

    poll = await client.get("/api/palm/next-order", headers=device_headers)

    assert poll.json()["order"]["id"] == first["order"]["id"]


@pytest.mark.asyncio
async def test_next_order_scoped_to_device(client, device, products):
    other = (await client.post("/api/palm/register", json={"name": "Back Counter"})).json()["device"]
    await client.post("/api/orders", json=order_body(device, products))

    poll = await client.get(
        "/api/palm/next-order",
        headers={"Authorization": f"Bearer {other['apiToken']}"},
    )

    assert poll.json() == {"order": None}


@pytest.mark.asyncio
async def test_complete_without_body_and_unknown_order(client, device, products):
    created = (await client.post("/api/orders", json=order_body(device, products))).json()["order"]

    done = await client.post(f"/api/palm/complete-order/{created['id']}")
    assert done.status_code == 200
    assert done.json()["order"]["status"] == "completed"

    missing = await client.post("/api/palm/complete-order/no-such-order", json={})
    assert missing.status_code == 404
    assert missing.json()["code"] == "not_found"


@pytest.mark.asyncio
async def test_list_filters(client, device, products):
    a = (await client.post("/api/orders", json=order_body(device, products, customerName="Alice Smith"))).json()
    await client.post("/api/orders", json=order_body(device, products, customerName="Bob Jones"))
    await client.post(f"/api/palm/complete-order/{a['order']['id']}", json={})

    by_name = await client.get("/api/orders", params={"customerName": "alice"})
    assert [o["customerName"] for o in by_name.json()["orders"]] == ["Alice Smith"]

    pending = await client.get("/api/orders", params={"status": "pending"})
    assert [o["customerName"] for o in pending.json()["orders"]] == ["Bob Jones"]

    everything = await client.get("/api/orders")
    assert [o["customerName"] for o in everything.json()["orders"]] == ["Bob Jones", "Alice Smith"]


@pytest.mark.asyncio
async def test_transactions(client, device, products):
    customer = (await client.post("/api/customers", json={"name": "Carol"})).json()["customer"]
    body = order_body(device, products, customerId=customer["id"], customerName="Carol")

    paid = (await client.post("/api/orders", json=body)).json()["order"]
    await client.post("/api/orders", json=body)
    await client.post(f"/api/palm/complete-order/{paid['id']}", json={})

    response = await client.get(f"/api/transactions/{customer['id']}")

    assert response.status_code == 200
    assert [t["id"] for t in response.json()["transactions"]] == [paid["id"]]
