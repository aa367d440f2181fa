"""Test configuration for notice-dispatch."""

import pytest

pytest_plugins = ["pytest_asyncio"]


@pytest.fixture
def send_request():
    """Sample send request for testing."""
    from notice_dispatch.request import SendRequest

    return SendRequest(
        request_id="r1",
        target="user@x.com",
        template_content="hi ${name}",
        variables={"name": "Ann"},
    )


@pytest.fixture
def notice_content():
    """Sample rendered notice."""
    from notice_dispatch.delivery import RenderedNotice

    return RenderedNotice(
        body_text="Test message body",
        subject="Test Subject",
    )


@pytest.fixture
def memory_sender():
    from notice_dispatch.senders.memory import InMemorySender

    return InMemorySender(channel="email")


@pytest.fixture
def memory_configuration():
    from notice_dispatch.request import SenderConfiguration

    return SenderConfiguration(channel_type="email", template_type="placeholder")


@pytest.fixture
def no_sleep():
    """Retry wrapper that records delays instead of sleeping."""
    from notice_dispatch.retry import RetryWrapper

    delays: list[float] = []

    async def _sleep(seconds: float) -> None:
        delays.append(seconds)

    wrapper = RetryWrapper(sleep=_sleep)
    wrapper.delays = delays  # type: ignore[attr-defined]
    return wrapper
