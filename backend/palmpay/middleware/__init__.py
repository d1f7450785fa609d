# Middleware package init
"""
PalmPay Backend — Middleware Package
======================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    The request ID is assigned first so the access log line and any error
    body produced further down carry the same correlation ID.
"""
