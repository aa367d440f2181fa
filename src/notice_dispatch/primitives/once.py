"""OnceGuard — run an async setup routine at most once."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger("notice_dispatch.once")


class OnceGuard:
    """
    Double-checked, lock-guarded one-time initialization.

    The ``done`` flag is read without the lock on the fast path; only callers
    that observe it unset contend for the lock, and the flag is checked again
    once the lock is held. A routine that raises leaves the flag unset so a
    later call runs it again.

    Example::

        guard = OnceGuard()
        await guard.run(connect)   # runs connect()
        await guard.run(connect)   # no-op
    """

    def __init__(self) -> None:
        self._done = False
        self._lock = asyncio.Lock()

    @property
    def done(self) -> bool:
        return self._done

    async def run(self, fn: Callable[[], Awaitable[None]]) -> bool:
        """Run *fn* unless it already completed. Returns True if this call ran it."""
        if self._done:
            return False
        async with self._lock:
            if self._done:
                return False
            await fn()
            self._done = True
            logger.debug("One-time initialization completed: %r", fn)
            return True

    def reset(self) -> None:
        """Allow the routine to run again (after ``destroy``, or in tests)."""
        self._done = False
