"""Port definitions for notice dispatch."""

from __future__ import annotations

from notice_dispatch.ports.interceptor import ISendInterceptor
from notice_dispatch.ports.policies import IBlacklistChecker, IIdempotencyStore, IRateLimiter
from notice_dispatch.ports.renderer import ITemplateRenderer
from notice_dispatch.ports.sender import ISender

__all__ = [
    "ISender",
    "ITemplateRenderer",
    "IIdempotencyStore",
    "IBlacklistChecker",
    "IRateLimiter",
    "ISendInterceptor",
]
