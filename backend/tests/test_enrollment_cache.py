"""
PalmPay Backend — Enrollment Token Cache Tests
================================================

What we test:
    ✅ issue() returns a 32-hex-char token that resolves to the payload
    ✅ the first read at/after expiry is 410 and removes the token
    ✅ a second read of the same expired token is 404
    ✅ sweep() removes only expired entries
    ✅ the sweeper loop keeps running after a failed sweep
"""

import asyncio
import re

import pytest

from palmpay.enrollment import EnrollmentTokenCache, run_sweeper
from palmpay.exceptions import NotFoundError, TokenExpiredError


class TestIssueAndResolve:

    def test_token_format_and_payload(self, fake_clock):
        cache = EnrollmentTokenCache(ttl=600, clock=fake_clock)
        entry = cache.issue({"leftPalmvein": "abc"})

        assert re.fullmatch(r"[0-9a-f]{32}", entry.token)
        assert cache.resolve(entry.token).palm_features == {"leftPalmvein": "abc"}
        assert cache.remaining(entry) == 600

    def test_tokens_are_unique(self, fake_clock):
        cache = EnrollmentTokenCache(clock=fake_clock)
        tokens = {cache.issue(i).token for i in range(50)}
        assert len(tokens) == 50

    def test_resolve_does_not_consume(self, fake_clock):
        cache = EnrollmentTokenCache(ttl=600, clock=fake_clock)
        entry = cache.issue("features")
        cache.resolve(entry.token)
        assert cache.resolve(entry.token).palm_features == "features"

    def test_unknown_token(self, fake_clock):
        cache = EnrollmentTokenCache(clock=fake_clock)
        with pytest.raises(NotFoundError):
            cache.resolve("0" * 32)


class TestExpiry:

    def test_valid_just_before_expiry(self, fake_clock):
        cache = EnrollmentTokenCache(ttl=600, clock=fake_clock)
        entry = cache.issue("f")
        fake_clock.advance(599.9)
        assert cache.resolve(entry.token) is entry
        assert cache.remaining(entry) == 0

    def test_expired_read_is_gone_then_not_found(self, fake_clock):
        cache = EnrollmentTokenCache(ttl=600, clock=fake_clock)
        entry = cache.issue("f")
        fake_clock.advance(600)

        with pytest.raises(TokenExpiredError):
            cache.resolve(entry.token)
        assert entry.token not in cache

        with pytest.raises(NotFoundError):
            cache.resolve(entry.token)

    def test_sweep_removes_only_expired(self, fake_clock):
        cache = EnrollmentTokenCache(ttl=600, clock=fake_clock)
        old = cache.issue("old")
        fake_clock.advance(300)
        fresh = cache.issue("fresh")
        fake_clock.advance(300)

        assert cache.sweep() == 1
        assert old.token not in cache
        assert fresh.token in cache
        assert len(cache) == 1

    def test_discard_is_idempotent(self, fake_clock):
        cache = EnrollmentTokenCache(clock=fake_clock)
        entry = cache.issue("f")
        assert cache.discard(entry.token) is entry
        assert cache.discard(entry.token) is None


class TestSweeper:

    @pytest.mark.asyncio
    async def test_sweeper_survives_errors(self, fake_clock):
        calls = []

        class FlakyCache(EnrollmentTokenCache):
            def sweep(self):
                calls.append(1)
                if len(calls) == 1:
                    raise RuntimeError("boom")
                return 0

        task = asyncio.create_task(run_sweeper(FlakyCache(clock=fake_clock), interval=0))
        for _ in range(20):
            await asyncio.sleep(0)
            if len(calls) >= 2:
                break
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert len(calls) >= 2
