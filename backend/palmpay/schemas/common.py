"""
PalmPay Backend — Shared Schema Building Blocks
=================================================

What:  Base model for the camelCase JSON contract plus the error and health
       response shapes used by every router.
How:   `ApiModel` generates camelCase aliases (`total_amount` ↔ `totalAmount`),
       accepts either spelling on input, and reads ORM objects directly
       (`from_attributes`). FastAPI serializes response models by alias.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base class for every request and response model of the API."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(BaseModel):
    """
    What:  Error body returned by every global exception handler.

    Example:
        {
            "error": "Invalid device token",
            "code": "unauthorized",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Human-readable error message")
    code: str = Field(description="Machine-readable error code")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for load balancers and kiosk watchdogs."""
    status: str = Field(description="ok, or degraded when the database is unreachable")
    timestamp: datetime = Field(description="Server time (UTC)")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
