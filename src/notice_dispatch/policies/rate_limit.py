"""Rate limiters."""

from __future__ import annotations

import asyncio
import time
from collections import deque
from collections.abc import Callable
from typing import TYPE_CHECKING

from ..ports.policies import IRateLimiter

if TYPE_CHECKING:
    from ..request import SendRequest


class NoopRateLimiter(IRateLimiter):
    async def allow(self, request: SendRequest) -> bool:
        return True

    async def record(self, request: SendRequest) -> None:
        return None


class SlidingWindowRateLimiter(IRateLimiter):
    """
    Allows at most ``limit`` recorded sends per target within ``window``
    seconds. Only sends passed to ``record`` count against the limit.

    Targets with no send inside the window are dropped, at most once per
    window, so idle targets do not accumulate.
    """

    def __init__(
        self,
        limit: int,
        window: float = 60.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.limit = limit
        self.window = window
        self._clock = clock
        self._sent: dict[str, deque[float]] = {}
        self._lock = asyncio.Lock()
        self._last_sweep = clock()

    def _prune(self, sent: deque[float], now: float) -> deque[float]:
        while sent and now - sent[0] >= self.window:
            sent.popleft()
        return sent

    def _sweep(self, now: float) -> None:
        idle = [t for t, sent in self._sent.items() if not self._prune(sent, now)]
        for target in idle:
            del self._sent[target]
        self._last_sweep = now

    async def allow(self, request: SendRequest) -> bool:
        async with self._lock:
            sent = self._sent.get(request.target)
            if sent is None:
                return True
            return len(self._prune(sent, self._clock())) < self.limit

    async def record(self, request: SendRequest) -> None:
        async with self._lock:
            now = self._clock()
            if now - self._last_sweep >= self.window:
                self._sweep(now)
            sent = self._sent.setdefault(request.target, deque())
            self._prune(sent, now).append(now)

    @property
    def tracked_targets(self) -> int:
        return len(self._sent)
