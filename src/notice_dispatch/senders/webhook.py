"""Webhook sender with HMAC signature."""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from ..delivery import DeliveryRecord
from ..exceptions import SenderNotConfiguredError
from .base import BaseSender

if TYPE_CHECKING:
    import httpx

    from ..delivery import RenderedNotice
    from ..request import SendRequest, SenderConfiguration

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS = frozenset({408, 425, 429})


class WebhookSettings(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    secret: str | None = None
    timeout: float = 10.0
    user_agent: str = "notice-dispatch/0.1.0"
    headers: dict[str, str] = Field(default_factory=dict)


class WebhookSender(BaseSender):
    """
    HTTP POST webhook sender; the request target is the URL.

    When a secret is configured the JSON payload is signed with HMAC-SHA256
    and the signature sent in ``X-Webhook-Signature``. Transport errors,
    5xx and 408/425/429 replies are retryable, other 4xx replies are fatal.
    """

    channel = "webhook"

    def __init__(self, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        super().__init__()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self.settings: WebhookSettings | None = None

    def _apply_configuration(self, configuration: SenderConfiguration) -> None:
        self.settings = WebhookSettings.model_validate(dict(configuration.config))

    async def _do_configure(self, configuration: SenderConfiguration) -> None:
        # Lazy import of httpx
        try:
            import httpx
        except ImportError as e:
            raise ImportError(
                "httpx is required for WebhookSender. "
                "Install with: pip install 'notice-dispatch[http]'"
            ) from e

        self._client = httpx.AsyncClient(transport=self._transport)

    def _build_payload(self, request: SendRequest, content: RenderedNotice) -> dict[str, Any]:
        return {
            "request_id": request.request_id,
            "recipient": request.target,
            "cc": list(request.cc),
            "subject": content.subject or "",
            "body_text": content.body_text,
        }

    async def _do_send(self, request: SendRequest, content: RenderedNotice) -> DeliveryRecord:
        import httpx

        settings = self.settings
        if settings is None or self._client is None:
            raise SenderNotConfiguredError(
                self.channel_type, request_id=request.request_id, target=request.target
            )
        payload_json = json.dumps(
            self._build_payload(request, content), separators=(",", ":"), sort_keys=True
        )
        headers = {
            "Content-Type": "application/json",
            "User-Agent": settings.user_agent,
            "X-Request-ID": request.request_id,
            **settings.headers,
        }
        if settings.secret:
            headers["X-Webhook-Signature"] = self.calculate_signature(
                payload_json, settings.secret
            )

        try:
            response = await self._client.post(
                request.target,
                content=payload_json.encode("utf-8"),
                headers=headers,
                timeout=settings.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error("Webhook HTTP error: %d - %s", status, e.response.text[:200])
            return DeliveryRecord.failed(
                self.channel_type,
                request.target,
                error=f"HTTP {status}",
                retryable=status >= 500 or status in _RETRYABLE_STATUS,
            )
        except httpx.TransportError as e:
            logger.warning("Webhook transport error for %s: %s", request.target, e)
            return DeliveryRecord.failed(
                self.channel_type, request.target, error=str(e), retryable=True
            )

        logger.info("Webhook sent successfully to %s", request.target)
        return DeliveryRecord.sent(
            self.channel_type,
            request.target,
            provider_id=response.headers.get("X-Request-ID", request.request_id),
        )

    async def _do_destroy(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def calculate_signature(payload: str, secret: str) -> str:
        digest = hmac.new(
            key=secret.encode("utf-8"),
            msg=payload.encode("utf-8"),
            digestmod=hashlib.sha256,
        ).hexdigest()
        return f"sha256={digest}"

    @staticmethod
    def verify_signature(payload: str, signature: str, secret: str) -> bool:
        """
        Verify a webhook signature using constant-time comparison.

        Use this in webhook receivers to authenticate incoming notices.
        """
        expected = WebhookSender.calculate_signature(payload, secret)
        return hmac.compare_digest(expected, signature)
