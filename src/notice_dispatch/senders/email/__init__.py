"""Email senders."""

from __future__ import annotations

from .smtp import SmtpEmailSender, SmtpSettings

__all__ = ["SmtpEmailSender", "SmtpSettings"]
