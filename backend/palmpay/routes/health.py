"""
PalmPay Backend — Health Check Route
======================================

What:  Liveness/readiness probe for load balancers and kiosk watchdogs.
How:   Runs `SELECT 1` against the pool. The endpoint always answers 200;
       `status` is "degraded" when the database cannot be reached so the
       caller decides what to do with that.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from sqlalchemy import text

from palmpay import __version__
from palmpay.database import engine
from palmpay.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


async def probe_database() -> bool:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Health check: database unreachable: %s", str(e))
        return False
    return True


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    connected = await probe_database()
    return HealthResponse(
        status="ok" if connected else "degraded",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        database="connected" if connected else "disconnected",
    )
