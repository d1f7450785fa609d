"""
PalmPay Backend — Palm Device API Tests
=========================================

What we test:
    ✅ Registration returns a 64-hex apiToken exactly once
    ✅ Listings (both paths) never expose tokens
    ✅ PATCH updates only the fields sent
    ✅ Bearer-protected endpoints: 401 for missing/unknown tokens
    ✅ Device auth-log write with defaults, and lastSeenAt stamping
"""

import re

import pytest


@pytest.mark.asyncio
async def test_register_returns_token(device):
    assert re.fullmatch(r"[0-9a-f]{64}", device["apiToken"])
    assert device["active"] is True
    assert device["lastSeenAt"] is None


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/api/palm/devices", "/api/palm-devices"])
async def test_listing_hides_tokens(client, device, path):
    response = await client.get(path)

    assert response.status_code == 200
    devices = response.json()["devices"]
    assert [d["id"] for d in devices] == [device["id"]]
    assert "apiToken" not in devices[0]
    assert device["apiToken"] not in response.text


@pytest.mark.asyncio
async def test_patch_device(client, device):
    response = await client.patch(f"/api/palm/devices/{device['id']}", json={"location": "Store 2"})

    assert response.status_code == 200
    updated = response.json()["device"]
    assert updated["name"] == "Front Counter"
    assert updated["location"] == "Store 2"
    assert "apiToken" not in updated


@pytest.mark.asyncio
async def test_patch_unknown_device(client):
    response = await client.patch("/api/palm/devices/nope", json={"name": "X"})
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("path,method", [
    ("/api/palm/next-order", "get"),
    ("/api/palm-devices/auth-log", "post"),
])
@pytest.mark.parametrize("headers,message", [
    ({}, "Missing authorization token"),
    ({"Authorization": "Token abc"}, "Missing authorization token"),
    ({"Authorization": "Bearer " + "0" * 64}, "Invalid device token"),
])
async def test_bearer_required(client, device, path, method, headers, message):
    response = await getattr(client, method)(path, headers=headers)

    assert response.status_code == 401
    assert response.json()["error"] == message
    assert response.json()["code"] == "unauthorized"


@pytest.mark.asyncio
async def test_auth_log_defaults_and_last_seen(client, device, device_headers):
    response = await client.post("/api/palm-devices/auth-log", headers=device_headers, json={})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    log = body["log"]
    assert log["palmDeviceId"] == device["id"]
    assert log["deviceType"] == "palm_scanner"
    assert log["location"] == "Store 1"
    assert log["success"] is False
    assert log["reason"] == ""

    listed = (await client.get("/api/palm/devices")).json()["devices"][0]
    assert listed["lastSeenAt"] is not None


@pytest.mark.asyncio
async def test_auth_log_without_body(client, device_headers):
    response = await client.post("/api/palm-devices/auth-log", headers=device_headers)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_device_logs_feed(client, device, device_headers):
    await client.post(
        "/api/palm-devices/auth-log",
        headers=device_headers,
        json={"success": True, "reason": "matched"},
    )

    response = await client.get("/api/v1/palm/device-logs")

    assert response.status_code == 200
    entries = response.json()
    assert len(entries) == 1
    assert entries[0]["deviceName"] == "Front Counter"
    assert entries[0]["deviceLocation"] == "Store 1"
    assert entries[0]["success"] is True
