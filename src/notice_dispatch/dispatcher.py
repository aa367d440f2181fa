"""NoticeDispatcher — the single entry point of the dispatch pipeline."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from .delivery import DispatchState, RenderedNotice, SendResult
from .exceptions import (
    BlacklistedError,
    ConfigurationError,
    DuplicateRequestError,
    NoticeError,
    RateLimitedError,
    ValidationError,
)
from .interceptors.chain import InterceptorChain
from .policies.blacklist import NoopBlacklistChecker
from .policies.idempotency import NoopIdempotencyStore
from .policies.rate_limit import NoopRateLimiter
from .retry import (
    FixedRetryPolicy,
    NoRetryPolicy,
    RetryPolicy,
    RetryWrapper,
    retry_policy_from_config,
)
from .senders import SenderRegistry, builtin_sender_factories
from .template.registry import RendererRegistry

if TYPE_CHECKING:
    from .ports.interceptor import ISendInterceptor
    from .ports.policies import IBlacklistChecker, IIdempotencyStore, IRateLimiter
    from .ports.sender import ISender
    from .request import SenderConfiguration, SendRequest

logger = logging.getLogger(__name__)


class DispatcherOptions(BaseModel):
    """Tunables of :class:`NoticeDispatcher`."""

    model_config = ConfigDict(frozen=True)

    retry_enabled: bool = True
    batch_concurrency: int = Field(default=10, ge=1)


class NoticeDispatcher:
    """
    Validates, gates, renders and sends one notice.

    The pipeline for each request::

        RECEIVED -> GATE_CHECKED -> RENDERED -> CONFIGURED -> SENT
                 -> RECORDED -> COMPLETED

    Any step can move the dispatch to ``FAILED``. :meth:`dispatch` never
    raises for a dispatch error; it returns a failed :class:`SendResult`
    whose ``error`` holds the typed exception and whose ``reason`` names
    the last state reached.

    Gates run in order blacklist, rate limit, idempotency. A request id is
    claimed for the duration of the dispatch and marked processed only
    after a successful send, so concurrent duplicates are rejected while a
    failed send can be retried with the same id.
    """

    def __init__(
        self,
        registry: SenderRegistry | None = None,
        renderers: RendererRegistry | None = None,
        *,
        idempotency_store: IIdempotencyStore | None = None,
        blacklist_checker: IBlacklistChecker | None = None,
        rate_limiter: IRateLimiter | None = None,
        interceptors: Iterable[ISendInterceptor] = (),
        retry_policy: RetryPolicy | None = None,
        retry_wrapper: RetryWrapper | None = None,
        options: DispatcherOptions | None = None,
    ) -> None:
        self.registry = registry or SenderRegistry.from_factories(
            builtin_sender_factories()
        )
        self.renderers = renderers or RendererRegistry.with_defaults()
        self.idempotency_store = idempotency_store or NoopIdempotencyStore()
        self.blacklist_checker = blacklist_checker or NoopBlacklistChecker()
        self.rate_limiter = rate_limiter or NoopRateLimiter()
        self.interceptors = InterceptorChain(interceptors)
        self.retry_policy = retry_policy or FixedRetryPolicy()
        self.options = options or DispatcherOptions()
        self._retry = retry_wrapper or RetryWrapper()

    # ── Interceptors ────────────────────────────────────────────

    def add_interceptor(self, interceptor: ISendInterceptor) -> None:
        self.interceptors.add(interceptor)

    def remove_interceptor(self, interceptor: ISendInterceptor) -> None:
        self.interceptors.remove(interceptor)

    # ── Dispatch ────────────────────────────────────────────────

    async def dispatch(
        self, request: SendRequest, configuration: SenderConfiguration
    ) -> SendResult:
        """Run the full pipeline for one request."""
        state = DispatchState.RECEIVED
        attempts = 0
        claimed = False
        try:
            errors = request.validate()
            if errors:
                raise ValidationError(
                    errors, request_id=request.request_id, target=request.target
                )

            await self._check_gates(request)
            if not await self.idempotency_store.claim(request.request_id):
                raise DuplicateRequestError(
                    request.request_id, target=request.target, in_flight=True
                )
            claimed = True
            state = DispatchState.GATE_CHECKED

            content = self._render(request, configuration)
            state = DispatchState.RENDERED

            sender = await self._prepare_sender(configuration)
            policy = self._policy_for(configuration)
            state = DispatchState.CONFIGURED

            result = await self._send(sender, request, content, policy)
            attempts = result.attempts
            state = DispatchState.SENT

            await self.idempotency_store.put(request.request_id)
            await self.rate_limiter.record(request)
            state = DispatchState.RECORDED

            logger.debug(
                "Dispatch %s completed via %s", request.request_id, sender.channel_type
            )
            return result
        except NoticeError as e:
            e.bind(request.request_id, request.target)
            logger.warning(
                "Dispatch %s failed in state %s: %s", request.request_id, state.value, e
            )
            return SendResult.fail(
                e, failed_in=state, attempts=getattr(e, "attempts", attempts)
            )
        except Exception as e:
            logger.exception(
                "Unexpected error dispatching %s in state %s",
                request.request_id,
                state.value,
            )
            error = NoticeError(
                str(e) or type(e).__name__,
                request_id=request.request_id,
                target=request.target,
            )
            error.__cause__ = e
            return SendResult.fail(error, failed_in=state, attempts=attempts)
        finally:
            if claimed:
                await self._release(request.request_id)

    async def dispatch_batch(
        self,
        requests: Sequence[SendRequest],
        configuration: SenderConfiguration,
    ) -> list[SendResult]:
        """Dispatch concurrently; results are returned in input order."""
        semaphore = asyncio.Semaphore(self.options.batch_concurrency)

        async def _one(request: SendRequest) -> SendResult:
            async with semaphore:
                return await self.dispatch(request, configuration)

        results = await asyncio.gather(*(_one(r) for r in requests))
        failed = sum(1 for r in results if not r.success)
        logger.info("Batch of %d dispatched, %d failed", len(results), failed)
        return list(results)

    async def close(self) -> None:
        """Destroy every sender held by the registry."""
        await self.registry.destroy()

    # ── Pipeline steps ──────────────────────────────────────────

    async def _check_gates(self, request: SendRequest) -> None:
        if await self.blacklist_checker.is_blacklisted(request):
            raise BlacklistedError(request.target, request_id=request.request_id)
        if not await self.rate_limiter.allow(request):
            raise RateLimitedError(request.target, request_id=request.request_id)
        if await self.idempotency_store.exists(request.request_id):
            raise DuplicateRequestError(request.request_id, target=request.target)

    def _render(
        self, request: SendRequest, configuration: SenderConfiguration
    ) -> RenderedNotice:
        renderer = self.renderers.get(configuration.template_type)
        body = renderer.render(request.template_content, request.variables)
        subject = configuration.get("subject")
        if subject is not None:
            subject = renderer.render(str(subject), request.variables)
        return RenderedNotice(body_text=body, subject=subject)

    async def _prepare_sender(self, configuration: SenderConfiguration) -> ISender:
        sender = await self.registry.resolve(configuration)
        await sender.configure(configuration)
        return sender

    def _policy_for(self, configuration: SenderConfiguration) -> RetryPolicy:
        if not self.options.retry_enabled:
            return NoRetryPolicy()
        try:
            return retry_policy_from_config(configuration, self.retry_policy)
        except ValueError as e:
            raise ConfigurationError(
                configuration.channel_type or "console", f"invalid retry settings: {e}"
            ) from e

    async def _send(
        self,
        sender: ISender,
        request: SendRequest,
        content: RenderedNotice,
        policy: RetryPolicy,
    ) -> SendResult:
        await self.interceptors.before_send(request)
        try:
            record, attempts = await self._retry.call(sender, request, content, policy)
        except Exception as e:
            await self.interceptors.on_error(request, e)
            raise
        result = SendResult.ok(
            request.request_id,
            request.target,
            record.provider_id,
            attempts=attempts,
            channel=sender.channel_type,
        )
        await self.interceptors.after_send(request, result)
        return result

    async def _release(self, request_id: str) -> None:
        try:
            await self.idempotency_store.release(request_id)
        except Exception:
            logger.exception("Failed to release idempotency claim for %s", request_id)
