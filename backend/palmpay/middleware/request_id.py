"""
PalmPay Backend — Request ID Middleware
=========================================

What:  Assigns a short correlation ID to each request and echoes it back.
How:   Reuses the caller's X-Request-ID header when present, otherwise
       generates one; stores it in a ContextVar for loggers and exception
       handlers and in `request.state` for route handlers.
Who:   Applied to every request; kiosks include the header in their own
       logs so a failed payment can be traced to a server log line.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Sets X-Request-ID on the way in (if missing) and on the way out."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
