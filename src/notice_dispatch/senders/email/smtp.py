"""SMTP email sender."""

from __future__ import annotations

import email.message
import email.policy
import email.utils
import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from ...delivery import DeliveryRecord
from ...exceptions import SenderNotConfiguredError
from ..base import BaseSender

if TYPE_CHECKING:
    from ...delivery import RenderedNotice
    from ...request import SendRequest, SenderConfiguration

logger = logging.getLogger(__name__)


class SmtpSettings(BaseModel):
    """Connection settings read from ``SenderConfiguration.config``."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    host: str
    port: int = 587
    username: str | None = None
    password: str | None = None
    from_email: str
    use_tls: bool = False
    start_tls: bool = True
    timeout: float = 10.0
    default_subject: str | None = None


class SmtpEmailSender(BaseSender):
    """
    Async SMTP email sender using aiosmtplib.

    4xx replies and connection problems are reported as retryable; 5xx
    replies and refused recipients are fatal.
    """

    channel = "email"

    def __init__(self) -> None:
        super().__init__()
        self.settings: SmtpSettings | None = None
        self._smtp: Any = None

    def _apply_configuration(self, configuration: SenderConfiguration) -> None:
        self.settings = SmtpSettings.model_validate(dict(configuration.config))

    async def _do_configure(self, configuration: SenderConfiguration) -> None:
        # Lazy import of aiosmtplib
        try:
            import aiosmtplib
        except ImportError as e:
            raise ImportError(
                "aiosmtplib is required for SmtpEmailSender. "
                "Install with: pip install 'notice-dispatch[smtp]'"
            ) from e

        self._smtp = aiosmtplib

    def _build_message(
        self, request: SendRequest, content: RenderedNotice, settings: SmtpSettings
    ) -> email.message.EmailMessage:
        message = email.message.EmailMessage(policy=email.policy.default)
        message["To"] = request.target
        if request.cc:
            message["Cc"] = ", ".join(request.cc)
        message["From"] = settings.from_email
        subject = content.subject or settings.default_subject
        if subject:
            message["Subject"] = subject
        message["Message-ID"] = email.utils.make_msgid()

        body = content.body_text
        if "<html" in body.lower() or "<body" in body.lower():
            message.set_content(body, subtype="html", charset="utf-8")
        else:
            message.set_content(body, charset="utf-8")
        return message

    async def _do_send(self, request: SendRequest, content: RenderedNotice) -> DeliveryRecord:
        settings = self.settings
        aiosmtplib = self._smtp
        if settings is None or aiosmtplib is None:
            raise SenderNotConfiguredError(
                self.channel_type, request_id=request.request_id, target=request.target
            )
        message = self._build_message(request, content, settings)

        try:
            async with aiosmtplib.SMTP(
                hostname=settings.host,
                port=settings.port,
                timeout=settings.timeout,
                use_tls=settings.use_tls,
                start_tls=settings.start_tls and not settings.use_tls,
            ) as smtp:
                if settings.username and settings.password:
                    await smtp.login(settings.username, settings.password)
                await smtp.send_message(message)

            logger.info("Email %s sent to %s via SMTP", request.request_id, request.target)
            return DeliveryRecord.sent(
                self.channel_type, request.target, provider_id=message["Message-ID"]
            )

        except aiosmtplib.SMTPRecipientsRefused as e:
            logger.error("SMTP refused recipients for %s: %s", request.target, e)
            return DeliveryRecord.failed(self.channel_type, request.target, error=str(e))
        except aiosmtplib.SMTPResponseException as e:
            transient = 400 <= e.code < 500
            logger.error("SMTP error %d sending to %s: %s", e.code, request.target, e.message)
            return DeliveryRecord.failed(
                self.channel_type,
                request.target,
                error=f"SMTP {e.code}: {e.message}",
                retryable=transient,
            )
        except (aiosmtplib.SMTPServerDisconnected, aiosmtplib.SMTPTimeoutError, OSError) as e:
            logger.warning("SMTP connection problem sending to %s: %s", request.target, e)
            return DeliveryRecord.failed(
                self.channel_type, request.target, error=str(e), retryable=True
            )
        except Exception as e:
            logger.error("Failed to send email to %s: %s", request.target, e)
            return DeliveryRecord.failed(self.channel_type, request.target, error=str(e))
