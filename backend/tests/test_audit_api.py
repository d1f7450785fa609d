"""
PalmPay Backend — Authentication Log API Tests
================================================

What we test:
    ✅ Logs page newest first; total is the full row count
    ✅ limit/offset bounds (limit 1..max, offset >= 0)
    ✅ /auth-history serves the same data
    ✅ Writing a log for an unknown user is 404
"""

import pytest

from palmpay.config import settings


async def seed_logs(client, user_id, count):
    for i in range(count):
        response = await client.post(
            f"/api/v1/users/{user_id}/auth-logs",
            json={"success": i % 2 == 0, "deviceId": f"kiosk-{i}", "reason": str(i)},
        )
        assert response.status_code == 200


@pytest.mark.asyncio
async def test_paging_and_total(client, user):
    await seed_logs(client, user["id"], 5)

    page = await client.get(f"/api/v1/users/{user['id']}/auth-logs", params={"limit": 2, "offset": 1})

    assert page.status_code == 200
    body = page.json()
    assert body["total"] == 5
    assert (body["limit"], body["offset"]) == (2, 1)
    assert [log["reason"] for log in body["logs"]] == ["3", "2"]
    assert body["logs"][0]["method"] == "palm"


@pytest.mark.asyncio
async def test_default_limit_and_alias(client, user):
    await seed_logs(client, user["id"], 2)

    logs = (await client.get(f"/api/v1/users/{user['id']}/auth-logs")).json()
    history = (await client.get(f"/api/v1/users/{user['id']}/auth-history")).json()

    assert logs["limit"] == settings.auth_log_default_limit
    assert logs == history


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [
    {"limit": 0},
    {"limit": settings.auth_log_max_limit + 1},
    {"offset": -1},
])
async def test_paging_bounds(client, user, params):
    response = await client.get(f"/api/v1/users/{user['id']}/auth-logs", params=params)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_log_for_unknown_user(client):
    response = await client.post("/api/v1/users/ghost/auth-logs", json={"success": False})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_unknown_user_has_empty_page(client):
    response = await client.get("/api/v1/users/ghost/auth-logs")

    assert response.status_code == 200
    assert response.json()["logs"] == []
    assert response.json()["total"] == 0
