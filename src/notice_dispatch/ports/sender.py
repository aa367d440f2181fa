"""Sender plugin port."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..delivery import DeliveryRecord, RenderedNotice
    from ..request import SendRequest, SenderConfiguration


@runtime_checkable
class ISender(Protocol):
    """
    Delivery plugin for one channel/provider combination.

    Instances are created once, configured lazily on first use, reused for
    the process lifetime and released with ``destroy()`` on shutdown.
    Adapters must explicitly declare: class SmtpEmailSender(ISender):
    """

    @property
    def channel_type(self) -> str:
        """Registry key of the channel this sender serves."""
        ...

    @property
    def is_configured(self) -> bool: ...

    async def configure(self, configuration: SenderConfiguration) -> None:
        """Store the configuration and run the one-time setup if still pending."""
        ...

    async def send(self, request: SendRequest, content: RenderedNotice) -> DeliveryRecord:
        """Deliver rendered content and report the attempt.

        Transport or provider failures are reported through a failed
        ``DeliveryRecord`` whose ``failure_kind`` tells the retry wrapper
        whether the attempt may succeed if repeated.
        """
        ...

    async def destroy(self) -> None:
        """Release provider resources."""
        ...
