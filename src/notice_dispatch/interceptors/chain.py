"""Interceptor chain."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

from ..ports.interceptor import ISendInterceptor

if TYPE_CHECKING:
    from ..delivery import SendResult
    from ..request import SendRequest

logger = logging.getLogger(__name__)


class SendInterceptor(ISendInterceptor):
    """Convenience base with no-op hooks; override the ones you need."""

    async def before_send(self, request: SendRequest) -> None:
        return None

    async def after_send(self, request: SendRequest, result: SendResult) -> None:
        return None

    async def on_error(self, request: SendRequest, error: Exception) -> None:
        return None


class InterceptorChain:
    """
    Ordered collection of interceptors.

    Hooks run in registration order. A hook that raises is logged and
    skipped; the remaining hooks and the dispatch itself continue.
    """

    def __init__(self, interceptors: Iterable[ISendInterceptor] = ()) -> None:
        self._interceptors: list[ISendInterceptor] = list(interceptors)

    def add(self, interceptor: ISendInterceptor) -> None:
        self._interceptors.append(interceptor)

    def remove(self, interceptor: ISendInterceptor) -> None:
        """Remove *interceptor*; unknown interceptors are ignored."""
        try:
            self._interceptors.remove(interceptor)
        except ValueError:
            logger.debug("Interceptor %r was not registered", interceptor)

    def __iter__(self) -> Iterator[ISendInterceptor]:
        return iter(list(self._interceptors))

    def __len__(self) -> int:
        return len(self._interceptors)

    async def before_send(self, request: SendRequest) -> None:
        for interceptor in self:
            try:
                await interceptor.before_send(request)
            except Exception:
                logger.exception(
                    "%s.before_send failed for %s",
                    type(interceptor).__name__,
                    request.request_id,
                )

    async def after_send(self, request: SendRequest, result: SendResult) -> None:
        for interceptor in self:
            try:
                await interceptor.after_send(request, result)
            except Exception:
                logger.exception(
                    "%s.after_send failed for %s",
                    type(interceptor).__name__,
                    request.request_id,
                )

    async def on_error(self, request: SendRequest, error: Exception) -> None:
        for interceptor in self:
            try:
                await interceptor.on_error(request, error)
            except Exception:
                logger.exception(
                    "%s.on_error failed for %s",
                    type(interceptor).__name__,
                    request.request_id,
                )
