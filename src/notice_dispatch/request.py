"""Send request and sender configuration value objects."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


def _freeze(mapping: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class SendRequest:
    """Immutable request to deliver one notice.

    ``request_id`` is the caller-supplied idempotency key and stays the same
    across retries of the same logical send.
    """

    request_id: str
    target: str
    template_content: str
    variables: Mapping[str, Any] = field(default_factory=dict)
    cc: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "variables", _freeze(self.variables))
        object.__setattr__(self, "cc", tuple(self.cc or ()))

    def validate(self) -> dict[str, list[str]]:
        """Return field errors; an empty dict means the request is well formed."""
        errors: dict[str, list[str]] = {}
        for name in ("request_id", "target", "template_content"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                errors.setdefault(name, []).append("is required")
        for index, address in enumerate(self.cc):
            if not isinstance(address, str) or not address.strip():
                errors.setdefault("cc", []).append(f"entry {index} is blank")
        return errors


@dataclass(frozen=True)
class SenderConfiguration:
    """Channel setup shared read-only by every dispatch that uses it.

    ``config`` is opaque to the core and interpreted only by the sender.
    """

    channel_type: str | None
    template_type: str | None = None
    config: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "config", _freeze(self.config))

    def get(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def fingerprint(self) -> str:
        """Deterministic key for caching one sender instance per configuration."""
        channel = (self.channel_type or "").lower()
        pairs = "&".join(f"{k}={self.config[k]}" for k in sorted(self.config))
        return f"{channel}|{pairs}"
