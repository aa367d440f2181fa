"""Blacklist checkers."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from ..ports.policies import IBlacklistChecker

if TYPE_CHECKING:
    from ..request import SendRequest


class NoopBlacklistChecker(IBlacklistChecker):
    async def is_blacklisted(self, request: SendRequest) -> bool:
        return False


class StaticBlacklistChecker(IBlacklistChecker):
    """Blocks a fixed set of targets, compared case-insensitively."""

    def __init__(self, targets: Iterable[str] = ()) -> None:
        self._targets = {t.strip().lower() for t in targets}

    def add(self, target: str) -> None:
        self._targets.add(target.strip().lower())

    def remove(self, target: str) -> None:
        self._targets.discard(target.strip().lower())

    async def is_blacklisted(self, request: SendRequest) -> bool:
        return request.target.strip().lower() in self._targets
