"""Redis implementations of the policy gates."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..ports.policies import IIdempotencyStore, IRateLimiter

if TYPE_CHECKING:
    from redis.asyncio import Redis

    from ..request import SendRequest

logger = logging.getLogger("notice_dispatch.redis")

_PROCESSED = b"done"
_IN_FLIGHT = b"pending"


class RedisIdempotencyStore(IIdempotencyStore):
    """
    Shared idempotency store for multi-process deployments.

    One key per request id holds either ``pending`` (claimed, in flight,
    expires after ``claim_ttl``) or ``done`` (processed, expires after
    ``ttl``). ``claim`` is a single ``SET NX``, so only one process wins.
    """

    def __init__(
        self,
        redis_client: Redis,
        *,
        prefix: str = "notice:idem:",
        ttl: int = 86_400,
        claim_ttl: int = 300,
    ) -> None:
        self._redis = redis_client
        self._prefix = prefix
        self._ttl = ttl
        self._claim_ttl = claim_ttl

    def _key(self, request_id: str) -> str:
        return f"{self._prefix}{request_id}"

    async def exists(self, request_id: str) -> bool:
        value = await self._redis.get(self._key(request_id))
        if isinstance(value, str):
            value = value.encode()
        return value == _PROCESSED

    async def put(self, request_id: str) -> None:
        await self._redis.set(self._key(request_id), _PROCESSED, ex=self._ttl)

    async def claim(self, request_id: str) -> bool:
        acquired = await self._redis.set(
            self._key(request_id), _IN_FLIGHT, ex=self._claim_ttl, nx=True
        )
        return bool(acquired)

    async def release(self, request_id: str) -> None:
        key = self._key(request_id)
        value = await self._redis.get(key)
        if isinstance(value, str):
            value = value.encode()
        if value == _IN_FLIGHT:
            await self._redis.delete(key)


class RedisRateLimiter(IRateLimiter):
    """Fixed-window limiter: at most ``limit`` recorded sends per target per ``window`` seconds."""

    def __init__(
        self,
        redis_client: Redis,
        *,
        limit: int,
        window: int = 60,
        prefix: str = "notice:rate:",
    ) -> None:
        self._redis = redis_client
        self.limit = limit
        self.window = window
        self._prefix = prefix

    def _key(self, target: str) -> str:
        return f"{self._prefix}{target.lower()}"

    async def allow(self, request: SendRequest) -> bool:
        count = await self._redis.get(self._key(request.target))
        return int(count or 0) < self.limit

    async def record(self, request: SendRequest) -> None:
        key = self._key(request.target)
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.incr(key)
            pipe.expire(key, self.window, nx=True)
            await pipe.execute()
