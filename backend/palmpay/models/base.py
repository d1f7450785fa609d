"""Column defaults shared by every PalmPay model."""

import uuid
from datetime import datetime, timezone


def new_id() -> str:
    """Opaque string primary key (UUID4)."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
