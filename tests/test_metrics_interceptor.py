"""Tests for MetricsInterceptor."""

from unittest.mock import MagicMock, patch

import pytest

from notice_dispatch.delivery import SendResult
from notice_dispatch.exceptions import FatalSendError
from notice_dispatch.interceptors.metrics import MetricsInterceptor


@pytest.fixture
def prometheus_mocks():
    pytest.importorskip("prometheus_client")
    histogram = MagicMock()
    counter = MagicMock()
    with patch("prometheus_client.Histogram", return_value=histogram), patch(
        "prometheus_client.Counter", return_value=counter
    ):
        yield histogram, counter


@pytest.mark.asyncio
async def test_metrics_records_success(send_request, prometheus_mocks):
    """Test a successful send observes duration and counts the outcome."""
    histogram, counter = prometheus_mocks
    interceptor = MetricsInterceptor()

    await interceptor.before_send(send_request)
    await interceptor.after_send(
        send_request, SendResult.ok("r1", "user@x.com", channel="email")
    )

    histogram.labels.assert_called_once_with(channel="email", outcome="success")
    histogram.labels.return_value.observe.assert_called_once()
    counter.labels.assert_called_once_with(channel="email", outcome="success")
    counter.labels.return_value.inc.assert_called_once()


@pytest.mark.asyncio
async def test_metrics_records_error(send_request, prometheus_mocks):
    _, counter = prometheus_mocks
    interceptor = MetricsInterceptor()

    await interceptor.before_send(send_request)
    await interceptor.on_error(send_request, FatalSendError("sms", "rejected"))

    counter.labels.assert_called_once_with(channel="sms", outcome="error")


@pytest.mark.asyncio
async def test_metrics_labels_each_send_with_its_channel(send_request, prometheus_mocks):
    """Test one interceptor shared by several channels labels each outcome."""
    _, counter = prometheus_mocks
    interceptor = MetricsInterceptor()

    await interceptor.after_send(
        send_request, SendResult.ok("r1", "user@x.com", channel="email")
    )
    await interceptor.after_send(
        send_request, SendResult.ok("r1", "13800000000", channel="sms")
    )

    assert [c.kwargs for c in counter.labels.call_args_list] == [
        {"channel": "email", "outcome": "success"},
        {"channel": "sms", "outcome": "success"},
    ]


@pytest.mark.asyncio
async def test_metrics_default_channel_for_unlabelled_errors(send_request, prometheus_mocks):
    _, counter = prometheus_mocks
    interceptor = MetricsInterceptor(default_channel="webhook")

    await interceptor.on_error(send_request, RuntimeError("boom"))

    counter.labels.assert_called_once_with(channel="webhook", outcome="error")


@pytest.mark.asyncio
async def test_metrics_label_failure_is_swallowed(send_request, prometheus_mocks):
    """Test metric emission errors never reach the caller."""
    _, counter = prometheus_mocks
    counter.labels.side_effect = ValueError("bad label")
    interceptor = MetricsInterceptor()

    await interceptor.before_send(send_request)
    await interceptor.after_send(send_request, SendResult.ok("r1", "user@x.com"))


@pytest.mark.asyncio
async def test_metrics_disabled_without_prometheus(send_request):
    """Test the interceptor is a no-op when prometheus_client is missing."""
    with patch.dict("sys.modules", {"prometheus_client": None}):
        interceptor = MetricsInterceptor()

    assert interceptor.enabled is False
    await interceptor.before_send(send_request)
    await interceptor.after_send(send_request, SendResult.ok("r1", "user@x.com"))
