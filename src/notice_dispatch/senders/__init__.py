"""Sender plugins and the sender registry."""

from __future__ import annotations

from .base import BaseSender
from .console import ConsoleSender
from .memory import InMemorySender, SentNotice
from .registry import ENTRY_POINT_GROUP, SenderFactory, SenderRegistry


def builtin_sender_factories() -> dict[str, SenderFactory]:
    """Factories for the senders shipped with the package, keyed by channel."""
    from .email.smtp import SmtpEmailSender
    from .sms.sender import SmsSender
    from .webhook import WebhookSender

    return {
        ConsoleSender.channel: ConsoleSender,
        SmtpEmailSender.channel: SmtpEmailSender,
        SmsSender.channel: SmsSender,
        WebhookSender.channel: WebhookSender,
    }


__all__ = [
    "BaseSender",
    "ConsoleSender",
    "ENTRY_POINT_GROUP",
    "InMemorySender",
    "SenderFactory",
    "SenderRegistry",
    "SentNotice",
    "builtin_sender_factories",
]
