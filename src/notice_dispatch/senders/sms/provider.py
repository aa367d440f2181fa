"""SMS provider port and registry."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    import httpx

    from ...delivery import DeliveryRecord
    from ...request import SendRequest

logger = logging.getLogger(__name__)


@runtime_checkable
class ISmsProvider(Protocol):
    """
    One SMS vendor API.

    Providers deliver template-based messages: ``template_code`` names the
    vendor-side template and ``params`` fill its placeholders.
    """

    name: str

    async def send(
        self,
        request: SendRequest,
        template_code: str,
        params: Mapping[str, Any],
    ) -> DeliveryRecord: ...


SmsProviderFactory = Callable[[Mapping[str, Any], "httpx.AsyncClient"], ISmsProvider]


class SmsProviderRegistry:
    """Maps a provider name (``"aliyun"``, ``"tencent"``) to its factory."""

    def __init__(self, factories: Mapping[str, SmsProviderFactory] | None = None) -> None:
        self._factories: dict[str, SmsProviderFactory] = {}
        for name, factory in (factories or {}).items():
            self.register(name, factory)

    def register(self, name: str, factory: SmsProviderFactory) -> None:
        self._factories[name.lower()] = factory
        logger.debug("Registered SMS provider %s", name)

    def names(self) -> list[str]:
        return sorted(self._factories)

    def create(
        self, name: str, config: Mapping[str, Any], client: httpx.AsyncClient
    ) -> ISmsProvider:
        factory = self._factories.get(name.lower())
        if factory is None:
            raise ValueError(
                f"Unknown SMS provider {name!r}; expected one of {', '.join(self.names())}"
            )
        return factory(config, client)


def default_sms_providers() -> SmsProviderRegistry:
    from .aliyun import AliyunSmsProvider
    from .tencent import TencentSmsProvider

    return SmsProviderRegistry(
        {
            AliyunSmsProvider.name: AliyunSmsProvider.from_config,
            TencentSmsProvider.name: TencentSmsProvider.from_config,
        }
    )
