"""In-memory sender for test assertions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..delivery import DeliveryRecord
from .base import BaseSender

if TYPE_CHECKING:
    from ..delivery import RenderedNotice
    from ..request import SendRequest, SenderConfiguration

logger = logging.getLogger(__name__)


@dataclass
class SentNotice:
    """Record of a delivered notice for test assertions."""

    request: SendRequest
    content: RenderedNotice


@dataclass
class _ScriptedFailure:
    error: str
    retryable: bool
    remaining: int | None  # None = forever


class InMemorySender(BaseSender):
    """
    Test double (Fake) that stores notices in a list for assertions.

    Failures can be scripted with :meth:`fail_next` and :meth:`fail_always`;
    every physical attempt is counted in ``send_count``.
    """

    def __init__(self, channel: str = "memory") -> None:
        super().__init__()
        self._channel = channel
        self.sent_notices: list[SentNotice] = []
        self.send_count = 0
        self.configure_count = 0
        self.destroyed = False
        self._failures: list[_ScriptedFailure] = []

    @property
    def channel_type(self) -> str:
        return self._channel

    async def _do_configure(self, configuration: SenderConfiguration) -> None:
        self.configure_count += 1

    async def _do_send(self, request: SendRequest, content: RenderedNotice) -> DeliveryRecord:
        self.send_count += 1
        if self._failures:
            failure = self._failures[0]
            if failure.remaining is not None:
                failure.remaining -= 1
                if failure.remaining <= 0:
                    self._failures.pop(0)
            return DeliveryRecord.failed(
                self.channel_type,
                request.target,
                error=failure.error,
                retryable=failure.retryable,
            )
        self.sent_notices.append(SentNotice(request, content))
        return DeliveryRecord.sent(
            self.channel_type, request.target, provider_id=f"mem-{self.send_count}"
        )

    async def _do_destroy(self) -> None:
        self.destroyed = True

    def fail_next(
        self, times: int = 1, *, retryable: bool = False, error: str = "scripted failure"
    ) -> None:
        """Fail the next *times* attempts, then deliver normally."""
        self._failures.append(_ScriptedFailure(error, retryable, times))

    def fail_always(self, *, retryable: bool = False, error: str = "scripted failure") -> None:
        self._failures.append(_ScriptedFailure(error, retryable, None))

    @property
    def sent_bodies(self) -> list[str]:
        return [n.content.body_text for n in self.sent_notices]

    def assert_sent(self, target: str, count: int = 1) -> None:
        """Helper for test assertions."""
        matches = [n for n in self.sent_notices if n.request.target == target]
        if len(matches) != count:
            raise AssertionError(
                f"Expected {count} notices to {target} via {self.channel_type}, "
                f"but found {len(matches)}."
            )

    def clear(self) -> None:
        """Forget delivered notices and scripted failures."""
        self.sent_notices.clear()
        self._failures.clear()
        self.send_count = 0
