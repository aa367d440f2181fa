"""SmsSender — the ``sms`` channel, delegating to a vendor provider."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ...delivery import DeliveryRecord
from ...exceptions import SenderNotConfiguredError
from ..base import BaseSender
from .provider import default_sms_providers

if TYPE_CHECKING:
    import httpx

    from ...delivery import RenderedNotice
    from ...request import SendRequest, SenderConfiguration
    from .provider import ISmsProvider, SmsProviderRegistry

logger = logging.getLogger(__name__)


class SmsSender(BaseSender):
    """
    SMS channel sender. The ``provider`` key of the configuration selects the
    vendor (``aliyun``, ``tencent``); the rest of the configuration is handed
    to that provider. A changed configuration rebuilds the provider on the
    existing HTTP client; the client timeout is fixed by the first setup.

    Vendor templates are referenced by code: ``template_code`` from the
    configuration, or else the rendered content itself. Request variables
    become the template parameters.
    """

    channel = "sms"

    def __init__(
        self,
        providers: SmsProviderRegistry | None = None,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__()
        self._providers = providers or default_sms_providers()
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self.provider: ISmsProvider | None = None

    def _apply_configuration(self, configuration: SenderConfiguration) -> None:
        if not configuration.get("provider"):
            raise ValueError("SMS configuration requires a 'provider'")
        if self._client is not None:
            self.provider = self._create_provider(configuration, self._client)

    async def _do_configure(self, configuration: SenderConfiguration) -> None:
        # Lazy import of httpx
        try:
            import httpx
        except ImportError as e:
            raise ImportError(
                "httpx is required for SmsSender. "
                "Install with: pip install 'notice-dispatch[http]'"
            ) from e

        client = httpx.AsyncClient(
            timeout=configuration.get("timeout", self._timeout), transport=self._transport
        )
        try:
            self.provider = self._create_provider(configuration, client)
        except Exception:
            await client.aclose()
            raise
        self._client = client

    def _create_provider(
        self, configuration: SenderConfiguration, client: httpx.AsyncClient
    ) -> ISmsProvider:
        provider_name = str(configuration.get("provider"))
        provider = self._providers.create(provider_name, configuration.config, client)
        logger.debug("SMS sender using provider %s", provider_name)
        return provider

    async def _do_send(self, request: SendRequest, content: RenderedNotice) -> DeliveryRecord:
        provider = self.provider
        if provider is None:
            raise SenderNotConfiguredError(
                self.channel_type, request_id=request.request_id, target=request.target
            )
        configuration = self.configuration
        template_code: Any = configuration.get("template_code") if configuration else None
        template_code = template_code or content.body_text.strip()
        return await provider.send(request, template_code, request.variables)

    async def _do_destroy(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        self.provider = None
