"""Tests for Redis-backed policy gates."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from notice_dispatch.policies.redis import RedisIdempotencyStore, RedisRateLimiter
from notice_dispatch.request import SendRequest


@pytest.fixture
def mock_redis():
    client = AsyncMock()
    pipe = AsyncMock()
    pipe.incr = MagicMock()
    pipe.expire = MagicMock()
    pipeline_cm = MagicMock()
    pipeline_cm.__aenter__ = AsyncMock(return_value=pipe)
    pipeline_cm.__aexit__ = AsyncMock(return_value=None)
    client.pipeline = MagicMock(return_value=pipeline_cm)
    client.pipe = pipe
    return client


@pytest.mark.asyncio
async def test_claim_uses_set_nx(mock_redis):
    """Test claim is a single SET NX with the claim TTL."""
    mock_redis.set.return_value = True
    store = RedisIdempotencyStore(mock_redis, claim_ttl=30)

    assert await store.claim("r1") is True

    mock_redis.set.assert_called_once_with("notice:idem:r1", b"pending", ex=30, nx=True)


@pytest.mark.asyncio
async def test_claim_lost(mock_redis):
    mock_redis.set.return_value = None
    store = RedisIdempotencyStore(mock_redis)

    assert await store.claim("r1") is False


@pytest.mark.asyncio
async def test_put_marks_processed(mock_redis):
    store = RedisIdempotencyStore(mock_redis, ttl=3600)

    await store.put("r1")

    mock_redis.set.assert_called_once_with("notice:idem:r1", b"done", ex=3600)


@pytest.mark.asyncio
async def test_exists_only_for_processed(mock_redis):
    """Test an in-flight key does not count as processed."""
    store = RedisIdempotencyStore(mock_redis)

    mock_redis.get.return_value = b"done"
    assert await store.exists("r1") is True

    mock_redis.get.return_value = "done"
    assert await store.exists("r1") is True

    mock_redis.get.return_value = b"pending"
    assert await store.exists("r1") is False

    mock_redis.get.return_value = None
    assert await store.exists("r1") is False


@pytest.mark.asyncio
async def test_release_deletes_only_pending(mock_redis):
    """Test release never drops a processed marker."""
    store = RedisIdempotencyStore(mock_redis)

    mock_redis.get.return_value = b"pending"
    await store.release("r1")
    mock_redis.delete.assert_called_once_with("notice:idem:r1")

    mock_redis.delete.reset_mock()
    mock_redis.get.return_value = b"done"
    await store.release("r1")
    mock_redis.delete.assert_not_called()


@pytest.mark.asyncio
async def test_rate_limiter_allow(mock_redis):
    limiter = RedisRateLimiter(mock_redis, limit=2)
    request = SendRequest("r1", "User@x.com", "hi")

    mock_redis.get.return_value = b"1"
    assert await limiter.allow(request) is True

    mock_redis.get.return_value = b"2"
    assert await limiter.allow(request) is False

    mock_redis.get.return_value = None
    assert await limiter.allow(request) is True
    mock_redis.get.assert_called_with("notice:rate:user@x.com")


@pytest.mark.asyncio
async def test_rate_limiter_record(mock_redis):
    """Test record increments the counter and starts the window once."""
    limiter = RedisRateLimiter(mock_redis, limit=2, window=60)

    await limiter.record(SendRequest("r1", "user@x.com", "hi"))

    mock_redis.pipe.incr.assert_called_once_with("notice:rate:user@x.com")
    mock_redis.pipe.expire.assert_called_once_with(
        "notice:rate:user@x.com", 60, nx=True
    )
    mock_redis.pipe.execute.assert_awaited_once()
