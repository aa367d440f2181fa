"""MetricsInterceptor — Prometheus counters/histograms (optional [prometheus] extra).

Emits ``notice_dispatch_duration_seconds`` and ``notice_dispatch_total`` with
labels ``{channel, outcome}``; *outcome* is ``success`` or ``error``. The
channel comes from the result or the error; *default_channel* covers errors
that carry none.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from .chain import SendInterceptor

if TYPE_CHECKING:
    from ..delivery import SendResult
    from ..request import SendRequest

_logger = logging.getLogger(__name__)


class MetricsInterceptor(SendInterceptor):
    """Records duration and outcome per send.

    Without ``prometheus_client`` installed every hook is a no-op.
    """

    def __init__(self, default_channel: str = "unknown", registry: Any = None) -> None:
        self.default_channel = default_channel
        self._started: dict[str, float] = {}
        self._histogram = None
        self._counter = None
        try:
            from prometheus_client import Counter, Histogram

            kwargs = {} if registry is None else {"registry": registry}
            self._histogram = Histogram(
                "notice_dispatch_duration_seconds",
                "Send duration",
                ["channel", "outcome"],
                **kwargs,
            )
            self._counter = Counter(
                "notice_dispatch_total",
                "Send outcomes",
                ["channel", "outcome"],
                **kwargs,
            )
        except ImportError:
            pass

    @property
    def enabled(self) -> bool:
        return self._histogram is not None and self._counter is not None

    async def before_send(self, request: SendRequest) -> None:
        if self.enabled:
            self._started[request.request_id] = time.monotonic()

    async def after_send(self, request: SendRequest, result: SendResult) -> None:
        self._observe(request, result.channel, "success")

    async def on_error(self, request: SendRequest, error: Exception) -> None:
        self._observe(request, getattr(error, "channel", None), "error")

    def _observe(self, request: SendRequest, channel: str | None, outcome: str) -> None:
        if self._histogram is None or self._counter is None:
            return
        start = self._started.pop(request.request_id, None)
        try:
            labels = {"channel": channel or self.default_channel, "outcome": outcome}
            if start is not None:
                self._histogram.labels(**labels).observe(time.monotonic() - start)
            self._counter.labels(**labels).inc()
        except Exception:  # noqa: BLE001
            _logger.debug("Failed to emit metrics labels", exc_info=True)
