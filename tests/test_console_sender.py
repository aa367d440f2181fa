"""Tests for console sender."""

import logging

import pytest

from notice_dispatch.request import SenderConfiguration, SendRequest
from notice_dispatch.senders.console import ConsoleSender


@pytest.mark.asyncio
async def test_console_sender_logs_message(notice_content, caplog):
    """Test ConsoleSender logs messages."""
    sender = ConsoleSender()
    await sender.configure(SenderConfiguration(None))
    request = SendRequest("r1", "+1234567890", "ignored", cc=("+1987654321",))

    with caplog.at_level(logging.INFO):
        record = await sender.send(request, notice_content)

    assert record.is_success
    assert record.provider_id == "console-r1"
    assert "To:      +1234567890" in caplog.text
    assert "Cc:      +1987654321" in caplog.text
    assert "Subject: Test Subject" in caplog.text
    assert "Test message body" in caplog.text


@pytest.mark.asyncio
async def test_console_sender_stdout(send_request, notice_content, capsys):
    """Test ConsoleSender outputs to stdout when enabled."""
    sender = ConsoleSender(output_to_stdout=True)
    await sender.configure(SenderConfiguration(None))

    await sender.send(send_request, notice_content)

    captured = capsys.readouterr()
    assert "NOTICE r1" in captured.out
    assert "Test message body" in captured.out
