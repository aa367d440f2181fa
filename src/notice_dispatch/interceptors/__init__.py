"""Send interceptors."""

from __future__ import annotations

from .chain import InterceptorChain, SendInterceptor
from .logging import LoggingInterceptor
from .metrics import MetricsInterceptor

__all__ = [
    "InterceptorChain",
    "LoggingInterceptor",
    "MetricsInterceptor",
    "SendInterceptor",
]
