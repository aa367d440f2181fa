"""SenderRegistry — channel key to sender plugin lookup."""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from collections.abc import Callable, Mapping
from importlib.metadata import entry_points
from types import MappingProxyType
from typing import TYPE_CHECKING

from ..exceptions import ChannelNotFoundError
from .console import ConsoleSender

if TYPE_CHECKING:
    from ..ports.sender import ISender
    from ..request import SenderConfiguration

logger = logging.getLogger(__name__)

SenderFactory = Callable[[], "ISender"]

ENTRY_POINT_GROUP = "notice_dispatch.senders"


def _normalize(channel: str) -> str:
    return channel.strip().lower()


class SenderRegistry:
    """
    Maps a case-insensitive channel key to a sender.

    Two kinds of registration:

    - ``register(key, sender)``: one shared instance for the channel.
    - ``register_factory(key, factory)``: one instance per distinct
      configuration, built on first :meth:`resolve` and kept in a bounded
      LRU cache; evicted instances are destroyed.

    Writers swap in a new read-only mapping, so lookups running concurrently
    with registration never see a partially updated table. A ``None``
    channel resolves to the console sender; an unknown channel raises
    :class:`ChannelNotFoundError`.
    """

    def __init__(
        self,
        *,
        default_sender: ISender | None = None,
        cache_size: int = 1000,
    ) -> None:
        self._senders: Mapping[str, ISender] = MappingProxyType({})
        self._factories: Mapping[str, SenderFactory] = MappingProxyType({})
        self._instances: OrderedDict[str, ISender] = OrderedDict()
        self._default = default_sender or ConsoleSender()
        self._cache_size = max(1, cache_size)
        self._write_lock = threading.Lock()

    # ── Construction ────────────────────────────────────────────

    @classmethod
    def from_factories(
        cls, factories: Mapping[str, SenderFactory], **kwargs: object
    ) -> SenderRegistry:
        """Build a registry at startup from an explicit list of constructors."""
        registry = cls(**kwargs)  # type: ignore[arg-type]
        for channel, factory in factories.items():
            registry.register_factory(channel, factory)
        return registry

    @classmethod
    def discover(cls, group: str = ENTRY_POINT_GROUP, **kwargs: object) -> SenderRegistry:
        """Build a registry from every sender advertised under an entry-point group."""
        factories: dict[str, SenderFactory] = {}
        for ep in entry_points(group=group):
            try:
                factories[ep.name] = ep.load()
            except ImportError as e:
                logger.warning("Skipping sender plugin %s: %s", ep.name, e)
        logger.info("Discovered %d sender plugins: %s", len(factories), sorted(factories))
        return cls.from_factories(factories, **kwargs)

    # ── Registration ────────────────────────────────────────────

    def register(self, channel: str, sender: ISender) -> None:
        key = _normalize(channel)
        with self._write_lock:
            self._senders = MappingProxyType({**self._senders, key: sender})
        logger.debug("Registered sender %s for channel %s", type(sender).__name__, key)

    def register_factory(self, channel: str, factory: SenderFactory) -> None:
        key = _normalize(channel)
        with self._write_lock:
            self._factories = MappingProxyType({**self._factories, key: factory})
        logger.debug("Registered sender factory for channel %s", key)

    def unregister(self, channel: str) -> None:
        key = _normalize(channel)
        with self._write_lock:
            self._senders = MappingProxyType(
                {k: v for k, v in self._senders.items() if k != key}
            )
            self._factories = MappingProxyType(
                {k: v for k, v in self._factories.items() if k != key}
            )

    def channels(self) -> list[str]:
        return sorted({*self._senders, *self._factories})

    def __contains__(self, channel: object) -> bool:
        return isinstance(channel, str) and _normalize(channel) in self.channels()

    # ── Lookup ──────────────────────────────────────────────────

    def get(self, channel: str | None) -> ISender:
        """Return the shared sender registered for *channel*."""
        if channel is None:
            return self._default
        sender = self._senders.get(_normalize(channel))
        if sender is None:
            raise ChannelNotFoundError(channel)
        return sender

    async def resolve(self, configuration: SenderConfiguration) -> ISender:
        """Return the sender serving *configuration*, building one if needed."""
        channel = configuration.channel_type
        if channel is None:
            return self._default
        key = _normalize(channel)

        sender = self._senders.get(key)
        if sender is not None:
            return sender

        factory = self._factories.get(key)
        if factory is None:
            raise ChannelNotFoundError(channel)

        cache_key = configuration.fingerprint()
        sender = self._instances.get(cache_key)
        if sender is not None:
            self._instances.move_to_end(cache_key)
            return sender

        sender = factory()
        self._instances[cache_key] = sender
        logger.debug("Created %s for channel %s", type(sender).__name__, key)

        while len(self._instances) > self._cache_size:
            _, evicted = self._instances.popitem(last=False)
            await self._destroy_quietly(evicted)
        return sender

    # ── Shutdown ────────────────────────────────────────────────

    async def destroy(self) -> None:
        """Release every cached and registered sender."""
        instances = list(self._instances.values())
        self._instances.clear()
        for sender in [*instances, *self._senders.values(), self._default]:
            await self._destroy_quietly(sender)

    async def _destroy_quietly(self, sender: ISender) -> None:
        try:
            await sender.destroy()
        except Exception:
            logger.exception("Failed to destroy sender %s", type(sender).__name__)
