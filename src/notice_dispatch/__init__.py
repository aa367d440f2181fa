"""notice-dispatch — pluggable asyncio notification dispatch core.

Only pydantic is required. SMTP, HTTP providers, Jinja2 templates, Redis
gates and Prometheus metrics are optional extras.
"""

from __future__ import annotations

# ── Dispatch ─────────────────────────────────────────────────────
from .delivery import (
    DeliveryRecord,
    DeliveryStatus,
    DispatchState,
    FailureKind,
    RenderedNotice,
    SendResult,
)
from .dispatcher import DispatcherOptions, NoticeDispatcher

# ── Errors ───────────────────────────────────────────────────────
from .exceptions import (
    BlacklistedError,
    ChannelNotFoundError,
    ConfigurationError,
    DuplicateRequestError,
    FatalSendError,
    NoticeError,
    PolicyDeniedError,
    RateLimitedError,
    RetryableSendError,
    SendError,
    SenderNotConfiguredError,
    TemplateError,
    ValidationError,
)

# ── Interceptors & policies ──────────────────────────────────────
from .interceptors import (
    InterceptorChain,
    LoggingInterceptor,
    MetricsInterceptor,
    SendInterceptor,
)
from .policies import (
    InMemoryIdempotencyStore,
    NoopBlacklistChecker,
    NoopIdempotencyStore,
    NoopRateLimiter,
    SlidingWindowRateLimiter,
    StaticBlacklistChecker,
)

# ── Ports ────────────────────────────────────────────────────────
from .ports import (
    IBlacklistChecker,
    IIdempotencyStore,
    IRateLimiter,
    ISender,
    ISendInterceptor,
    ITemplateRenderer,
)
from .request import SenderConfiguration, SendRequest
from .retry import (
    ExponentialBackoffPolicy,
    FixedRetryPolicy,
    NoRetryPolicy,
    RetryPolicy,
    RetryWrapper,
)

# ── Senders & templates ──────────────────────────────────────────
from .senders import (
    BaseSender,
    ConsoleSender,
    InMemorySender,
    SenderRegistry,
    builtin_sender_factories,
)
from .template import (
    NoopRenderer,
    PlaceholderRenderer,
    RendererRegistry,
    extract_variables,
    render,
)

__version__ = "0.1.0"

__all__ = [
    # Dispatch
    "NoticeDispatcher",
    "DispatcherOptions",
    "SendRequest",
    "SenderConfiguration",
    "SendResult",
    "DeliveryRecord",
    "DeliveryStatus",
    "DispatchState",
    "FailureKind",
    "RenderedNotice",
    # Errors
    "NoticeError",
    "ValidationError",
    "PolicyDeniedError",
    "BlacklistedError",
    "RateLimitedError",
    "DuplicateRequestError",
    "TemplateError",
    "ConfigurationError",
    "SenderNotConfiguredError",
    "ChannelNotFoundError",
    "SendError",
    "RetryableSendError",
    "FatalSendError",
    # Interceptors & policies
    "InterceptorChain",
    "SendInterceptor",
    "LoggingInterceptor",
    "MetricsInterceptor",
    "NoopIdempotencyStore",
    "InMemoryIdempotencyStore",
    "NoopBlacklistChecker",
    "StaticBlacklistChecker",
    "NoopRateLimiter",
    "SlidingWindowRateLimiter",
    # Ports
    "ISender",
    "ITemplateRenderer",
    "IIdempotencyStore",
    "IBlacklistChecker",
    "IRateLimiter",
    "ISendInterceptor",
    # Retry
    "RetryPolicy",
    "NoRetryPolicy",
    "FixedRetryPolicy",
    "ExponentialBackoffPolicy",
    "RetryWrapper",
    # Senders & templates
    "SenderRegistry",
    "BaseSender",
    "ConsoleSender",
    "InMemorySender",
    "builtin_sender_factories",
    "RendererRegistry",
    "PlaceholderRenderer",
    "NoopRenderer",
    "extract_variables",
    "render",
]
