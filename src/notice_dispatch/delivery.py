"""Delivery outcome types: per-attempt records and per-dispatch results."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING

from .exceptions import FatalSendError, RetryableSendError, SendError

if TYPE_CHECKING:
    from .exceptions import NoticeError


class DeliveryStatus(Enum):
    """Outcome of a single physical send attempt."""

    SENT = "sent"
    FAILED = "failed"


class FailureKind(Enum):
    """Classifies a failed attempt for the retry wrapper."""

    RETRYABLE = "retryable"
    FATAL = "fatal"


class DispatchState(Enum):
    """Dispatcher state machine. ``COMPLETED`` and ``FAILED`` are terminal."""

    RECEIVED = "received"
    GATE_CHECKED = "gate_checked"
    RENDERED = "rendered"
    CONFIGURED = "configured"
    SENT = "sent"
    RECORDED = "recorded"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class RenderedNotice:
    """Immutable rendered content ready for delivery."""

    body_text: str
    subject: str | None = None


@dataclass(frozen=True)
class DeliveryRecord:
    """Immutable record of one send attempt, as reported by a sender."""

    channel: str
    target: str
    status: DeliveryStatus
    provider_id: str | None = None
    error: str | None = None
    failure_kind: FailureKind | None = None
    sent_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.sent_at is None:
            object.__setattr__(self, "sent_at", datetime.now(timezone.utc))
        if self.status is DeliveryStatus.FAILED and self.failure_kind is None:
            object.__setattr__(self, "failure_kind", FailureKind.FATAL)

    @classmethod
    def sent(
        cls,
        channel: str,
        target: str,
        provider_id: str | None = None,
    ) -> DeliveryRecord:
        """Create a successful delivery record."""
        return cls(
            channel=channel,
            target=target,
            status=DeliveryStatus.SENT,
            provider_id=provider_id,
        )

    @classmethod
    def failed(
        cls,
        channel: str,
        target: str,
        error: str | None = None,
        *,
        retryable: bool = False,
    ) -> DeliveryRecord:
        """Create a failed delivery record."""
        return cls(
            channel=channel,
            target=target,
            status=DeliveryStatus.FAILED,
            error=error,
            failure_kind=FailureKind.RETRYABLE if retryable else FailureKind.FATAL,
        )

    @property
    def is_success(self) -> bool:
        return self.status is DeliveryStatus.SENT

    @property
    def is_retryable(self) -> bool:
        return self.failure_kind is FailureKind.RETRYABLE

    def to_error(self, request_id: str | None = None) -> SendError:
        """Express a failed record as the matching exception type."""
        reason = self.error or "unknown error"
        if self.is_retryable:
            return RetryableSendError(
                self.channel, reason, request_id=request_id, target=self.target
            )
        return FatalSendError(
            self.channel, reason, request_id=request_id, target=self.target
        )


@dataclass(frozen=True)
class SendResult:
    """Outcome of one logical dispatch, returned to the caller."""

    success: bool
    request_id: str | None
    target: str | None
    state: DispatchState
    provider_id: str | None = None
    reason: str | None = None
    error: NoticeError | None = None
    attempts: int = 0
    channel: str | None = None

    @classmethod
    def ok(
        cls,
        request_id: str,
        target: str,
        provider_id: str | None = None,
        *,
        attempts: int = 1,
        channel: str | None = None,
    ) -> SendResult:
        return cls(
            success=True,
            request_id=request_id,
            target=target,
            state=DispatchState.COMPLETED,
            provider_id=provider_id,
            attempts=attempts,
            channel=channel,
        )

    @classmethod
    def fail(
        cls,
        error: NoticeError,
        *,
        failed_in: DispatchState,
        attempts: int = 0,
    ) -> SendResult:
        """Build a failed result; ``failed_in`` is the last state reached."""
        return cls(
            success=False,
            request_id=error.request_id,
            target=error.target,
            state=DispatchState.FAILED,
            reason=f"{failed_in.value}: {error}",
            error=error,
            attempts=attempts,
            channel=getattr(error, "channel", None),
        )

    def raise_for_error(self) -> None:
        """Re-raise the typed dispatch error, if any."""
        if self.error is not None:
            raise self.error
