"""Send interceptor port."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..delivery import SendResult
    from ..request import SendRequest


@runtime_checkable
class ISendInterceptor(Protocol):
    """
    Lifecycle hooks around one logical send.

    Interceptors observe, they never suppress: a failing hook is logged and
    the pipeline carries on.
    """

    async def before_send(self, request: SendRequest) -> None: ...

    async def after_send(self, request: SendRequest, result: SendResult) -> None: ...

    async def on_error(self, request: SendRequest, error: Exception) -> None: ...
