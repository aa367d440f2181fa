"""Tests for the one-time configuration gate."""

import asyncio

import pytest

from notice_dispatch.delivery import DeliveryRecord
from notice_dispatch.exceptions import ConfigurationError, SenderNotConfiguredError
from notice_dispatch.primitives.once import OnceGuard
from notice_dispatch.request import SenderConfiguration
from notice_dispatch.senders.base import BaseSender


class SlowSender(BaseSender):
    """Sender whose setup yields to the event loop and can be made to fail."""

    channel = "slow"

    def __init__(self, failures: int = 0):
        super().__init__()
        self.setup_calls = 0
        self.failures = failures

    async def _do_configure(self, configuration):
        self.setup_calls += 1
        await asyncio.sleep(0.01)
        if self.failures:
            self.failures -= 1
            raise RuntimeError("connection refused")

    async def _do_send(self, request, content):
        return DeliveryRecord.sent(self.channel_type, request.target)


@pytest.mark.asyncio
async def test_once_guard_runs_once():
    """Test OnceGuard only runs the routine on the first call."""
    guard = OnceGuard()
    calls = []

    async def setup():
        calls.append(1)

    assert await guard.run(setup) is True
    assert await guard.run(setup) is False
    assert calls == [1]
    assert guard.done


@pytest.mark.asyncio
async def test_once_guard_failure_allows_retry():
    """Test a failing routine leaves the guard open for the next call."""
    guard = OnceGuard()

    async def broken():
        raise RuntimeError("boom")

    async def working():
        return None

    with pytest.raises(RuntimeError):
        await guard.run(broken)
    assert not guard.done

    assert await guard.run(working) is True
    assert guard.done


@pytest.mark.asyncio
async def test_concurrent_first_use_configures_once():
    """Test N concurrent configure calls run the setup exactly once."""
    sender = SlowSender()
    configuration = SenderConfiguration("slow")

    await asyncio.gather(*(sender.configure(configuration) for _ in range(20)))

    assert sender.setup_calls == 1
    assert sender.is_configured


@pytest.mark.asyncio
async def test_configure_failure_is_wrapped_and_retried():
    """Test setup errors become ConfigurationError and the next call retries."""
    sender = SlowSender(failures=1)
    configuration = SenderConfiguration("slow")

    with pytest.raises(ConfigurationError) as exc_info:
        await sender.configure(configuration)

    assert "connection refused" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert not sender.is_configured

    await sender.configure(configuration)

    assert sender.is_configured
    assert sender.setup_calls == 2


@pytest.mark.asyncio
async def test_configure_stores_latest_configuration():
    """Test configure keeps the last configuration without re-running setup."""
    sender = SlowSender()
    first = SenderConfiguration("slow", config={"v": 1})
    second = SenderConfiguration("slow", config={"v": 2})

    await sender.configure(first)
    await sender.configure(second)

    assert sender.configuration is second
    assert sender.setup_calls == 1


@pytest.mark.asyncio
async def test_send_before_configure_fails(send_request, notice_content):
    """Test a sender refuses to send before it is configured."""
    sender = SlowSender()

    with pytest.raises(SenderNotConfiguredError) as exc_info:
        await sender.send(send_request, notice_content)

    assert exc_info.value.request_id == "r1"
    assert exc_info.value.target == "user@x.com"


@pytest.mark.asyncio
async def test_destroy_resets_configuration():
    sender = SlowSender()
    await sender.configure(SenderConfiguration("slow"))

    await sender.destroy()

    assert not sender.is_configured


class SettingsSender(SlowSender):
    def __init__(self):
        super().__init__()
        self.applied = []

    def _apply_configuration(self, configuration):
        if "host" not in configuration.config:
            raise ValueError("host is required")
        self.applied.append(configuration.get("host"))


@pytest.mark.asyncio
async def test_changed_configuration_is_reapplied():
    """Test settings follow the latest configuration while setup runs once."""
    sender = SettingsSender()
    first = SenderConfiguration("slow", config={"host": "a"})

    await sender.configure(first)
    await sender.configure(SenderConfiguration("slow", config={"host": "a"}))
    await sender.configure(SenderConfiguration("slow", config={"host": "b"}))

    assert sender.applied == ["a", "b"]
    assert sender.setup_calls == 1


@pytest.mark.asyncio
async def test_invalid_reconfiguration_is_wrapped():
    sender = SettingsSender()
    await sender.configure(SenderConfiguration("slow", config={"host": "a"}))

    with pytest.raises(ConfigurationError):
        await sender.configure(SenderConfiguration("slow", config={}))

    await sender.configure(SenderConfiguration("slow", config={"host": "a"}))
    assert sender.applied == ["a"]
    assert sender.configuration.get("host") == "a"
