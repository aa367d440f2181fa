"""Idempotency stores."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

from ..ports.policies import IIdempotencyStore

logger = logging.getLogger(__name__)


class NoopIdempotencyStore(IIdempotencyStore):
    """Never deduplicates. For deployments that do not need it."""

    async def exists(self, request_id: str) -> bool:
        return False

    async def put(self, request_id: str) -> None:
        return None

    async def claim(self, request_id: str) -> bool:
        return True

    async def release(self, request_id: str) -> None:
        return None


class InMemoryIdempotencyStore(IIdempotencyStore):
    """
    Single-process store with an optional time-to-live for processed ids.

    ``claim`` checks "processed" and "in flight" and marks the request in
    flight under one lock, so two concurrent dispatches of the same id can
    never both proceed.

    Processed ids are kept oldest first. Each ``put`` drops expired ids from
    the front and, past ``max_entries``, the oldest ones.
    """

    def __init__(
        self,
        ttl: float | None = None,
        *,
        max_entries: int | None = 100_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._ttl = ttl
        self._max_entries = max_entries
        self._clock = clock
        self._processed: dict[str, float] = {}
        self._in_flight: set[str] = set()
        self._lock = asyncio.Lock()

    def _is_processed(self, request_id: str) -> bool:
        stored_at = self._processed.get(request_id)
        if stored_at is None:
            return False
        if self._ttl is not None and self._clock() - stored_at > self._ttl:
            del self._processed[request_id]
            return False
        return True

    async def exists(self, request_id: str) -> bool:
        return self._is_processed(request_id)

    def _evict(self, now: float) -> None:
        processed = self._processed
        if self._ttl is not None:
            while processed:
                oldest, stored_at = next(iter(processed.items()))
                if now - stored_at <= self._ttl:
                    break
                del processed[oldest]
        if self._max_entries is not None:
            while len(processed) > self._max_entries:
                del processed[next(iter(processed))]

    async def put(self, request_id: str) -> None:
        now = self._clock()
        self._processed.pop(request_id, None)
        self._processed[request_id] = now
        self._evict(now)

    @property
    def processed_count(self) -> int:
        return len(self._processed)

    async def claim(self, request_id: str) -> bool:
        async with self._lock:
            if self._is_processed(request_id) or request_id in self._in_flight:
                return False
            self._in_flight.add(request_id)
            return True

    async def release(self, request_id: str) -> None:
        async with self._lock:
            self._in_flight.discard(request_id)

    def clear(self) -> None:
        self._processed.clear()
        self._in_flight.clear()
