"""LoggingInterceptor — logs each send with its duration."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from .chain import SendInterceptor

if TYPE_CHECKING:
    from ..delivery import SendResult
    from ..request import SendRequest

logger = logging.getLogger("notice_dispatch.interceptors")


class LoggingInterceptor(SendInterceptor):
    """Logs request id, target, provider id and duration of every send."""

    def __init__(self) -> None:
        self._started: dict[str, float] = {}

    def _elapsed_ms(self, request: SendRequest) -> float:
        start = self._started.pop(request.request_id, None)
        if start is None:
            return 0.0
        return (time.perf_counter() - start) * 1000

    async def before_send(self, request: SendRequest) -> None:
        self._started[request.request_id] = time.perf_counter()
        logger.info("Sending %s to %s", request.request_id, request.target)

    async def after_send(self, request: SendRequest, result: SendResult) -> None:
        logger.info(
            "%s delivered (provider_id=%s, attempts=%d) in %.2fms",
            request.request_id,
            result.provider_id,
            result.attempts,
            self._elapsed_ms(request),
        )

    async def on_error(self, request: SendRequest, error: Exception) -> None:
        logger.error(
            "%s failed after %.2fms: %s",
            request.request_id,
            self._elapsed_ms(request),
            error,
        )
