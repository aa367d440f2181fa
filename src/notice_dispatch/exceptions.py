"""Exception hierarchy for notice dispatch."""

from __future__ import annotations

from collections.abc import Iterable


class NoticeError(Exception):
    """Root exception for the notice dispatch toolkit.

    Dispatch failures carry the ``request_id`` and ``target`` of the request
    they belong to so callers can correlate them without extra context.
    """

    def __init__(
        self,
        message: str = "",
        *,
        request_id: str | None = None,
        target: str | None = None,
    ) -> None:
        self.request_id = request_id
        self.target = target
        super().__init__(message)

    def bind(self, request_id: str | None, target: str | None) -> NoticeError:
        """Attach request identity if the raiser did not know it."""
        if self.request_id is None:
            self.request_id = request_id
        if self.target is None:
            self.target = target
        return self


class ValidationError(NoticeError):
    """Raised when a send request is malformed or incomplete.

    Carries structured errors: ``{field: [messages]}``.
    """

    def __init__(
        self,
        errors: dict[str, list[str]] | str | None = None,
        *,
        request_id: str | None = None,
        target: str | None = None,
    ) -> None:
        if isinstance(errors, str):
            self.errors: dict[str, list[str]] = {"__root__": [errors]}
        elif errors is None:
            self.errors = {}
        else:
            self.errors = errors
        super().__init__(str(self.errors), request_id=request_id, target=target)


# ── Policy gates ─────────────────────────────────────────────────────


class PolicyDeniedError(NoticeError):
    """Base class for gate denials. The core never retries these."""

    reason = "policy_denied"


class BlacklistedError(PolicyDeniedError):
    """The request target is blacklisted."""

    reason = "blacklisted"

    def __init__(self, target: str, *, request_id: str | None = None) -> None:
        super().__init__(
            f"Target is blacklisted: {target}", request_id=request_id, target=target
        )


class RateLimitedError(PolicyDeniedError):
    """The request was throttled. Callers may back off and try again later."""

    reason = "rate_limited"

    def __init__(self, target: str, *, request_id: str | None = None) -> None:
        super().__init__(
            f"Rate limit exceeded for {target}", request_id=request_id, target=target
        )


class DuplicateRequestError(PolicyDeniedError):
    """The request id was already processed or is currently in flight."""

    reason = "duplicate"

    def __init__(
        self,
        request_id: str,
        *,
        target: str | None = None,
        in_flight: bool = False,
    ) -> None:
        self.in_flight = in_flight
        state = "in flight" if in_flight else "already processed"
        super().__init__(
            f"Duplicate request {request_id!r} ({state})",
            request_id=request_id,
            target=target,
        )


# ── Templates ────────────────────────────────────────────────────────


class TemplateError(NoticeError):
    """Raised when a template cannot be rendered.

    ``missing`` lists the referenced variables that were not supplied.
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        missing: Iterable[str] = (),
        request_id: str | None = None,
        target: str | None = None,
    ) -> None:
        self.missing: list[str] = sorted(set(missing))
        if message is None:
            message = f"Missing template variables: {', '.join(self.missing)}"
        super().__init__(message, request_id=request_id, target=target)


# ── Sender resolution & configuration ────────────────────────────────


class ConfigurationError(NoticeError):
    """A sender failed its one-time setup.

    The sender stays unconfigured, so a later dispatch retries the setup.
    """

    def __init__(self, channel: str, reason: str, **kwargs: str | None) -> None:
        self.channel = channel
        super().__init__(f"Failed to configure {channel} sender: {reason}", **kwargs)


class SenderNotConfiguredError(ConfigurationError):
    """A sender was invoked before its first successful configuration."""

    def __init__(self, channel: str, **kwargs: str | None) -> None:
        super().__init__(channel, "sender is not configured", **kwargs)


class ChannelNotFoundError(ConfigurationError):
    """No sender is registered for the requested channel."""

    def __init__(self, channel: str, **kwargs: str | None) -> None:
        super().__init__(channel, "unsupported channel", **kwargs)


# ── Sending ──────────────────────────────────────────────────────────


class SendError(NoticeError):
    """Base class for delivery failures reported by a sender.

    The message is built on demand so a ``target`` bound after the raise
    still shows up in it.
    """

    def __init__(
        self,
        channel: str,
        reason: str,
        *,
        request_id: str | None = None,
        target: str | None = None,
    ) -> None:
        self.channel = channel
        self.reason = reason
        super().__init__(reason, request_id=request_id, target=target)

    def __str__(self) -> str:
        return f"Failed to deliver via {self.channel} to {self.target}: {self.reason}"


class RetryableSendError(SendError):
    """A transient failure of a single attempt.

    The retry wrapper escalates it to :class:`FatalSendError` once attempts
    are exhausted; it is kept as the ``__cause__`` of that error.
    """


class FatalSendError(SendError):
    """A permanent provider failure, or retries exhausted."""

    def __init__(
        self,
        channel: str,
        reason: str,
        *,
        attempts: int = 1,
        exhausted: bool = False,
        request_id: str | None = None,
        target: str | None = None,
    ) -> None:
        self.attempts = attempts
        self.exhausted = exhausted
        super().__init__(channel, reason, request_id=request_id, target=target)
