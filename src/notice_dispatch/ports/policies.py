"""Policy gate ports: idempotency, blacklist and rate limiting."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..request import SendRequest


@runtime_checkable
class IIdempotencyStore(Protocol):
    """
    Remembers which request ids were fully processed.

    ``exists`` reports only terminally resolved requests. ``claim`` is the
    atomic check-and-set used to arbitrate concurrent duplicates: it marks a
    request in flight and returns False if it is already processed or
    claimed. ``release`` drops an in-flight claim.
    """

    async def exists(self, request_id: str) -> bool: ...

    async def put(self, request_id: str) -> None: ...

    async def claim(self, request_id: str) -> bool: ...

    async def release(self, request_id: str) -> None: ...


@runtime_checkable
class IBlacklistChecker(Protocol):
    """Decides whether a request target must never be contacted."""

    async def is_blacklisted(self, request: SendRequest) -> bool: ...


@runtime_checkable
class IRateLimiter(Protocol):
    """Throttles dispatches; ``record`` is called after an allowed, successful send."""

    async def allow(self, request: SendRequest) -> bool: ...

    async def record(self, request: SendRequest) -> None: ...
