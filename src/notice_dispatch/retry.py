"""Retry policies and the retry wrapper around a sender call."""

from __future__ import annotations

import asyncio
import logging
import random
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import FatalSendError, NoticeError, RetryableSendError, SendError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from .delivery import DeliveryRecord, RenderedNotice
    from .ports.sender import ISender
    from .request import SenderConfiguration, SendRequest

logger = logging.getLogger(__name__)


class RetryPolicy(BaseModel, ABC):
    """Base class for retry policies.

    ``max_attempts`` counts every attempt, the first one included.
    """

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=3, ge=1)
    jitter: bool = False

    @abstractmethod
    def calculate_delay(self, attempt: int) -> int:
        """Return delay in milliseconds before retrying after *attempt* (1-based)."""
        ...

    def delay_with_jitter(self, attempt: int) -> int:
        delay = self.calculate_delay(attempt)
        if self.jitter:
            # +/- 50% of delay
            delay = int(delay * (0.5 + random.random()))  # noqa: S311
        return max(0, delay)


class NoRetryPolicy(RetryPolicy):
    """A single attempt."""

    max_attempts: int = Field(default=1, ge=1, le=1)

    def calculate_delay(self, _attempt: int) -> int:
        return 0


class FixedRetryPolicy(RetryPolicy):
    """Retries with a fixed delay between attempts."""

    delay_ms: int = Field(default=100, ge=0)

    def calculate_delay(self, _attempt: int) -> int:
        return self.delay_ms


class ExponentialBackoffPolicy(RetryPolicy):
    """Retries with increasing delay (exponential backoff)."""

    initial_delay_ms: int = Field(default=100, ge=0)
    multiplier: float = Field(default=2.0, ge=1.0)
    max_delay_ms: int = Field(default=5000, ge=0)

    def calculate_delay(self, attempt: int) -> int:
        delay = self.initial_delay_ms * (self.multiplier ** (attempt - 1))
        return min(int(delay), self.max_delay_ms)


def retry_policy_from_config(
    configuration: SenderConfiguration, default: RetryPolicy
) -> RetryPolicy:
    """Read a per-channel retry policy from ``configuration.config``.

    Recognized keys: ``retry_max_attempts``, ``retry_delay_ms`` and
    ``retry_backoff`` (``fixed``, ``exponential`` or ``none``). Without any
    of them, *default* is returned unchanged.
    """
    max_attempts = configuration.get("retry_max_attempts")
    delay_ms = configuration.get("retry_delay_ms")
    backoff = configuration.get("retry_backoff")
    if max_attempts is None and delay_ms is None and backoff is None:
        return default

    backoff = str(backoff or "fixed").strip().lower()
    if backoff == "none":
        return NoRetryPolicy()

    params: dict[str, Any] = {
        "max_attempts": max_attempts if max_attempts is not None else default.max_attempts,
        "jitter": default.jitter,
    }
    if backoff == "exponential":
        if delay_ms is not None:
            params["initial_delay_ms"] = delay_ms
        return ExponentialBackoffPolicy(**params)
    if backoff == "fixed":
        if delay_ms is not None:
            params["delay_ms"] = delay_ms
        return FixedRetryPolicy(**params)
    raise ValueError(f"Unknown retry_backoff: {backoff!r}")


class RetryWrapper:
    """
    Calls ``sender.send`` under a :class:`RetryPolicy`.

    Records flagged ``FailureKind.RETRYABLE`` and a raised
    :class:`RetryableSendError` are re-attempted. Fatal records and any other
    exception raised by the sender fail the call at once.
    Exhausting the policy raises :class:`FatalSendError` with
    ``exhausted=True`` whose ``__cause__`` is the last retryable error.
    """

    def __init__(
        self, sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    ) -> None:
        self._sleep = sleep

    async def call(
        self,
        sender: ISender,
        request: SendRequest,
        content: RenderedNotice,
        policy: RetryPolicy,
    ) -> tuple[DeliveryRecord, int]:
        """Return the successful record and the number of attempts it took."""
        attempt = 0
        error: SendError
        while True:
            attempt += 1
            try:
                record = await sender.send(request, content)
            except RetryableSendError as e:
                e.bind(request.request_id, request.target)
                error = e
            except NoticeError as e:
                raise e.bind(request.request_id, request.target)
            except Exception as e:
                raise FatalSendError(
                    sender.channel_type,
                    str(e) or type(e).__name__,
                    attempts=attempt,
                    request_id=request.request_id,
                    target=request.target,
                ) from e
            else:
                if record.is_success:
                    return record, attempt
                error = record.to_error(request.request_id)

            if not isinstance(error, RetryableSendError):
                raise FatalSendError(
                    error.channel,
                    error.reason,
                    attempts=attempt,
                    request_id=request.request_id,
                    target=request.target,
                )

            if attempt >= policy.max_attempts:
                logger.warning(
                    "Giving up on %s after %d attempts: %s",
                    request.request_id,
                    attempt,
                    error.reason,
                )
                raise FatalSendError(
                    error.channel,
                    error.reason,
                    attempts=attempt,
                    exhausted=True,
                    request_id=request.request_id,
                    target=request.target,
                ) from error

            delay = policy.delay_with_jitter(attempt)
            logger.info(
                "Send failed: %s. Retrying in %dms (attempt %d/%d).",
                error.reason,
                delay,
                attempt,
                policy.max_attempts,
            )
            await self._sleep(delay / 1000.0)
