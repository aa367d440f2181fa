"""BaseSender — configuration gate shared by every sender plugin."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

from ..exceptions import ConfigurationError, NoticeError, SenderNotConfiguredError
from ..ports.sender import ISender
from ..primitives.once import OnceGuard

if TYPE_CHECKING:
    from ..delivery import DeliveryRecord, RenderedNotice
    from ..request import SendRequest, SenderConfiguration

logger = logging.getLogger(__name__)


class BaseSender(ISender, ABC):
    """
    Base class for sender plugins.

    ``configure`` always stores the latest configuration but runs
    ``_do_configure`` at most once for the lifetime of the instance, even when
    many dispatches hit a fresh sender concurrently. A failing setup is
    wrapped in :class:`ConfigurationError` and retried on the next call.

    Settings are read by ``_apply_configuration``, which runs whenever the
    stored configuration differs from the last one applied, so a shared
    sender picks up new hosts or credentials without repeating its setup.

    Subclasses implement ``_do_send`` and may override ``_apply_configuration``,
    ``_do_configure`` and ``_do_destroy``.
    """

    channel: ClassVar[str] = ""

    def __init__(self) -> None:
        self._configuration: SenderConfiguration | None = None
        self._applied: SenderConfiguration | None = None
        self._setup = OnceGuard()

    @property
    def channel_type(self) -> str:
        return self.channel

    @property
    def configuration(self) -> SenderConfiguration | None:
        return self._configuration

    @property
    def is_configured(self) -> bool:
        return self._setup.done

    async def configure(self, configuration: SenderConfiguration) -> None:
        self._configuration = configuration
        try:
            if configuration != self._applied:
                self._apply_configuration(configuration)
                self._applied = configuration
            ran = await self._setup.run(self._configure_once)
        except NoticeError:
            raise
        except Exception as e:
            logger.error("Configuration of %s sender failed: %s", self.channel_type, e)
            raise ConfigurationError(self.channel_type, str(e)) from e
        if ran:
            logger.info("%s sender configured", self.channel_type)

    async def _configure_once(self) -> None:
        if self._configuration is None:
            raise SenderNotConfiguredError(self.channel_type)
        await self._do_configure(self._configuration)

    def _apply_configuration(self, configuration: SenderConfiguration) -> None:
        """Validate and keep provider settings. No-op by default."""

    async def _do_configure(self, configuration: SenderConfiguration) -> None:
        """One-time setup (imports, clients). No-op by default."""

    async def send(self, request: SendRequest, content: RenderedNotice) -> DeliveryRecord:
        if not self.is_configured:
            raise SenderNotConfiguredError(
                self.channel_type, request_id=request.request_id, target=request.target
            )
        return await self._do_send(request, content)

    @abstractmethod
    async def _do_send(
        self, request: SendRequest, content: RenderedNotice
    ) -> DeliveryRecord: ...

    async def destroy(self) -> None:
        await self._do_destroy()
        self._applied = None
        self._setup.reset()

    async def _do_destroy(self) -> None:
        """Release provider resources. No-op by default."""
