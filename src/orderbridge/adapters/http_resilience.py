"""Async httpx client with retries, a client-side rate limit and an optional response cache."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, TypedDict, Unpack

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

from orderbridge.config.storage import get_http_cache_path

if TYPE_CHECKING:
    from types import TracebackType

    from httpx._client import UseClientDefault
    from httpx._types import HeaderTypes, QueryParamTypes, TimeoutTypes, URLTypes

    from orderbridge.config.http_resilience import CacheConfig, ResilienceConfig, RetryPolicy


log = getLogger(__name__)


class RequestOptions(TypedDict, total=False):
    params: QueryParamTypes | None
    headers: HeaderTypes | None
    timeout: TimeoutTypes | UseClientDefault


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        backoff_jitter=policy.backoff_jitter,
        respect_retry_after_header=policy.respect_retry_after_header,
        allowed_methods=tuple(policy.allowed_methods),
        status_forcelist=tuple(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
    )


def build_cache_storage(config: CacheConfig) -> AsyncSqliteStorage:
    if config.backend == "memory":
        database_path = ":memory:"
    elif config.backend == "sqlite":
        database_path = config.sqlite_path or str(get_http_cache_path())
    else:
        raise ValueError(f"Unsupported cache backend: {config.backend}")
    return AsyncSqliteStorage(database_path=database_path, default_ttl=config.ttl_seconds)


class ResilientClient:
    """Async HTTP client configured from a ``ResilienceConfig``.

    Retries happen inside the transport, below the rate limiter, so a retried
    request counts once against the budget. The limiter is shared by every
    request made through one instance, which keeps concurrent lookups within
    the configured rate.
    """

    def __init__(self, config: ResilienceConfig) -> None:
        self.config = config
        self._limiter: AsyncLimiter | None = None
        if config.ratelimit is not None:
            self._limiter = AsyncLimiter(
                config.ratelimit.max_calls, config.ratelimit.per_seconds
            )

        transport = RetryTransport(retry=build_retry(config.retry))
        headers = dict(config.default_headers or {})
        event_hooks = {"response": [self._log_response]}
        if config.cache is None:
            self._client = httpx.AsyncClient(
                base_url=config.base_url or "",
                timeout=config.timeout_seconds,
                headers=headers,
                transport=transport,
                event_hooks=event_hooks,
            )
        else:
            self._client = AsyncCacheClient(
                base_url=config.base_url or "",
                timeout=config.timeout_seconds,
                headers=headers,
                transport=transport,
                event_hooks=event_hooks,
                storage=build_cache_storage(config.cache),
            )

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self, method: str, url: URLTypes, **kwargs: Unpack[RequestOptions]
    ) -> httpx.Response:
        if self._limiter is None:
            return await self._client.request(method, url, **kwargs)
        async with self._limiter:
            return await self._client.request(method, url, **kwargs)

    async def get(self, url: URLTypes, **kwargs: Unpack[RequestOptions]) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def _log_response(self, response: httpx.Response) -> None:
        log.debug(
            "%s: %s %s -> %d",
            self.config.name,
            response.request.method,
            response.request.url,
            response.status_code,
        )
