"""
PalmPay Backend — Enrollment Token Cache
==========================================

What:  Process-wide, time-expiring map from enrollment token to the palm
       feature payload captured by a kiosk.
How:   The kiosk scans a palm and posts the features; the server stores
       them under a random 128-bit token rendered as a QR code. The user's
       phone scans the QR and fetches the payload to finish enrollment.
Who:   Used by PalmService; swept periodically by a background task
       started in the application lifespan (see main.py).

Lifecycle:
    issue()   → entry stored with expires_at = now + ttl
    resolve() → payload while now < expires_at
              → TokenExpiredError (410) on the first read at or after
                expires_at; the entry is removed by that read
              → NotFoundError (404) for unknown or already-removed tokens
    sweep()   → removes every expired entry

    Every removal is delete-if-present, so a sweep racing a resolve (or two
    sweeps) never raises; the loser just finds nothing to delete.

Time:
    The clock is injected (`clock=time.time` by default) so tests can move
    time deterministically instead of sleeping.
"""

import asyncio
import logging
import secrets
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from palmpay.config import settings
from palmpay.exceptions import NotFoundError, TokenExpiredError

logger = logging.getLogger(__name__)


@dataclass
class EnrollmentEntry:
    token: str
    palm_features: Any
    created_at: float
    expires_at: float

    @property
    def created_at_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.created_at, tz=timezone.utc)

    def remaining(self, now: float) -> int:
        """Whole seconds left before expiry (never negative)."""
        return max(0, int(round(self.expires_at - now)))


class EnrollmentTokenCache:
    """
    In-memory enrollment token store with explicit TTL sweep.

    Thread Safety:
        Mutated only from the event loop (request handlers and the sweep
        task), so no lock is needed. Not shared across worker processes:
        run a single worker, or sticky-route enrollment traffic.
    """

    def __init__(
        self,
        ttl: int = 600,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, EnrollmentEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, token: str) -> bool:
        return token in self._entries

    def issue(self, palm_features: Any) -> EnrollmentEntry:
        """Store a payload under a fresh 32-hex-char token."""
        now = self._clock()
        token = secrets.token_hex(16)
        entry = EnrollmentEntry(
            token=token,
            palm_features=palm_features,
            created_at=now,
            expires_at=now + self.ttl,
        )
        self._entries[token] = entry
        logger.info("Enrollment token issued (expires in %ds)", self.ttl)
        return entry

    def resolve(self, token: str) -> EnrollmentEntry:
        """
        Return the live entry for `token`.

        Raises:
            NotFoundError: token unknown (or already removed)
            TokenExpiredError: token present but expired; it is removed
        """
        entry = self._entries.get(token)
        if entry is None:
            raise NotFoundError(message="Enrollment token not found", resource="enrollment token")

        if self._clock() >= entry.expires_at:
            self.discard(token)
            raise TokenExpiredError()

        return entry

    def remaining(self, entry: EnrollmentEntry) -> int:
        return entry.remaining(self._clock())

    def discard(self, token: str) -> Optional[EnrollmentEntry]:
        """Delete-if-present."""
        return self._entries.pop(token, None)

    def sweep(self) -> int:
        """Remove every expired entry; returns how many were removed."""
        now = self._clock()
        expired = [token for token, entry in self._entries.items() if now >= entry.expires_at]
        for token in expired:
            self.discard(token)

        if expired:
            logger.debug("Swept %d expired enrollment tokens", len(expired))
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()


async def run_sweeper(cache: EnrollmentTokenCache, interval: float) -> None:
    """
    Background loop calling `cache.sweep()` every `interval` seconds.

    Started as an asyncio task in the lifespan and cancelled on shutdown.
    """
    while True:
        await asyncio.sleep(interval)
        try:
            cache.sweep()
        except Exception:
            logger.error("Enrollment token sweep failed", exc_info=True)


# ── Singleton Instance ────────────────────────────────────────────────────
enrollment_cache = EnrollmentTokenCache(ttl=settings.enrollment_token_ttl)
