"""
PalmPay Backend — Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for the error scenarios of the API.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return `{"error": <message>, "code": <code>, "request_id": <id>}`
       with the matching HTTP status.
Who:   Raised by services, the bearer-auth dependency and the enrollment
       cache; caught by global handlers.

Exception Hierarchy:
    PalmPayError (base)
    ├── ValidationError      → 400 Bad Request (missing/invalid field)
    ├── AuthenticationError  → 401 Unauthorized (bearer token)
    ├── NotFoundError        → 404 Not Found
    ├── TokenExpiredError    → 410 Gone (enrollment token past expiry)
    └── DatabaseError        → 500 Internal Server Error

    No distinction is made between transient and permanent failures and
    nothing is retried.
"""

from typing import Any, Dict, Optional


class PalmPayError(Exception):
    """
    Base exception for all PalmPay application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500
    code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(PalmPayError):
    """
    Raised when client input fails validation.

    When:    Missing required field (palmDeviceId, items, displayName, palmFeatures).
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "Device selection required",
            "code": "validation_error",
            "request_id": "a1b2c3d4"
        }
    """

    status_code = 400
    code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(PalmPayError):
    """
    Raised when a device bearer token is missing, malformed, or unknown.

    HTTP:    401 Unauthorized
    """

    status_code = 401
    code = "unauthorized"

    def __init__(
        self,
        message: str = "Missing authorization token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(PalmPayError):
    """
    Raised when a requested resource does not exist.

    When:    Lookup by id or token yields nothing.
    HTTP:    404 Not Found

    SQLAlchemy returns None for missing records; services convert that into
    NotFoundError so the status code is decided by the global handler.
    """

    status_code = 404
    code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class TokenExpiredError(PalmPayError):
    """
    Raised when an enrollment token existed but is past its expiry instant.

    HTTP:    410 Gone
    The token is removed as part of raising this, so the next lookup of the
    same token is a plain NotFoundError.
    """

    status_code = 410
    code = "gone"

    def __init__(
        self,
        message: str = "Enrollment token expired",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(PalmPayError):
    """
    Raised when database operations fail unexpectedly.

    When:    Connection lost mid-query, constraint violation, deadlock, etc.
    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always a generic
        per-operation message ("Failed to fetch products"). Details are
        logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
