"""
PalmPay Backend — Request Logging Middleware
==============================================

What:  One access-log line per request with status and duration.
How:   Times the downstream call with perf_counter and logs at a level
       chosen by status class (5xx ERROR, 4xx WARNING, else INFO).

Never logged: request bodies (palm features, card data) and the
Authorization header.

/health and the kiosk poll (/api/palm/next-order) are logged at DEBUG
only; kiosks hit them every few seconds.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from palmpay.middleware.request_id import request_id_var

logger = logging.getLogger("palmpay.access")

QUIET_PATHS = frozenset({"/health", "/api/palm/next-order"})


def level_for_status(status: int, path: str) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    if path in QUIET_PATHS:
        return logging.DEBUG
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status, duration and client IP for each request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        path = request.url.path
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code

        logger.log(
            level_for_status(status, path),
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
