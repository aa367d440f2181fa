"""Policy gate implementations."""

from __future__ import annotations

from .blacklist import NoopBlacklistChecker, StaticBlacklistChecker
from .idempotency import InMemoryIdempotencyStore, NoopIdempotencyStore
from .rate_limit import NoopRateLimiter, SlidingWindowRateLimiter

__all__ = [
    "InMemoryIdempotencyStore",
    "NoopBlacklistChecker",
    "NoopIdempotencyStore",
    "NoopRateLimiter",
    "SlidingWindowRateLimiter",
    "StaticBlacklistChecker",
]
