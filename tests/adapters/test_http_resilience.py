from __future__ import annotations

import httpx
import pytest
from hishel.httpx import AsyncCacheClient

from orderbridge.adapters.http_resilience import (
    ResilientClient,
    build_cache_storage,
    build_retry,
)
from orderbridge.config import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy


def test_build_retry_only_replays_reads() -> None:
    retry = build_retry(RetryPolicy(total=5))

    assert retry.total == 5
    assert "GET" in retry.allowed_methods
    assert "POST" not in retry.allowed_methods
    assert 503 in retry.status_forcelist


def test_unknown_cache_backend_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unsupported cache backend"):
        build_cache_storage(CacheConfig(backend="disk"))  # type: ignore[arg-type]


async def test_cache_can_be_disabled() -> None:
    async with ResilientClient(ResilienceConfig(name="plain", cache=None)) as client:
        assert not isinstance(client._client, AsyncCacheClient)  # noqa: SLF001


async def test_requests_pass_through_the_rate_limiter() -> None:
    seen: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return httpx.Response(200, json={"ok": True})

    config = ResilienceConfig(
        name="limited", cache=None, ratelimit=RateLimit(max_calls=100, per_seconds=1.0)
    )
    async with ResilientClient(config) as client:
        client._client = httpx.AsyncClient(  # noqa: SLF001
            base_url="https://catalog.example.test", transport=httpx.MockTransport(handler)
        )
        responses = [await client.get(f"/api/products/{n}") for n in range(3)]

    assert [r.status_code for r in responses] == [200, 200, 200]
    assert seen == ["/api/products/0", "/api/products/1", "/api/products/2"]
