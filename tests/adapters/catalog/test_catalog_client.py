from __future__ import annotations

from collections.abc import Callable  # noqa: TC003

import httpx
import pytest

from orderbridge.adapters.catalog import HttpProductCatalog
from orderbridge.adapters.http_resilience import ResilientClient
from orderbridge.config import CatalogApiConfig, ResilienceConfig, get_catalog_api_config
from orderbridge.domain.errors import PersistenceFailure
from orderbridge.domain.ports import ProductLookup
from orderbridge.domain.resolution import ProductIdentityResolver
from tests.helpers.orders import CODE_GADGET, CODE_UNKNOWN, CODE_WIDGET, GADGET, WIDGET

BASE_URL = "https://catalog.example.test/"


def _make_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(  # noqa: SLF001  # type: ignore[reportPrivateUsage]
            base_url=BASE_URL, transport=httpx.MockTransport(async_handler)
        )
        return client

    return factory


@pytest.fixture
def catalog_config() -> CatalogApiConfig:
    return CatalogApiConfig(
        base_url=BASE_URL,
        resilience=ResilienceConfig(name="catalog-test", base_url=BASE_URL, cache=None),
    )


def _product_handler(requests: list[httpx.Request]) -> Callable[[httpx.Request], httpx.Response]:
    known = {str(p.code): p for p in (WIDGET, GADGET)}

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        code = request.url.path.rsplit("/", 1)[-1]
        product = known.get(code)
        if product is None:
            return httpx.Response(404, json={"message": f"Product with code {code} not found"})
        return httpx.Response(
            200,
            json={
                "id": product.id,
                "productCode": str(product.code),
                "name": product.name,
                "productDescription": "ignored",
            },
        )

    return handler


async def test_get_by_code_returns_identity(catalog_config: CatalogApiConfig) -> None:
    requests: list[httpx.Request] = []
    catalog = HttpProductCatalog(
        config=catalog_config, client_factory=_make_client_factory(_product_handler(requests))
    )

    async with catalog:
        assert isinstance(catalog, ProductLookup)
        product = await catalog.get_by_code(CODE_WIDGET)

    assert product == WIDGET
    assert requests[0].method == "GET"
    assert requests[0].url.path == f"/api/products/code/{CODE_WIDGET}"


async def test_not_found_is_none(catalog_config: CatalogApiConfig) -> None:
    catalog = HttpProductCatalog(
        config=catalog_config, client_factory=_make_client_factory(_product_handler([]))
    )

    async with catalog:
        assert await catalog.get_by_code(CODE_UNKNOWN) is None


async def test_server_errors_become_persistence_failures(
    catalog_config: CatalogApiConfig,
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        _ = request
        return httpx.Response(503, json={"message": "maintenance"})

    catalog = HttpProductCatalog(
        config=catalog_config, client_factory=_make_client_factory(handler)
    )

    async with catalog:
        with pytest.raises(PersistenceFailure):
            await catalog.get_by_code(CODE_WIDGET)


async def test_transport_errors_become_persistence_failures(
    catalog_config: CatalogApiConfig,
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    catalog = HttpProductCatalog(
        config=catalog_config, client_factory=_make_client_factory(handler)
    )

    async with catalog:
        with pytest.raises(PersistenceFailure):
            await catalog.get_by_code(CODE_WIDGET)


async def test_malformed_payload_is_a_persistence_failure(
    catalog_config: CatalogApiConfig,
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        _ = request
        return httpx.Response(200, json={"unexpected": True})

    catalog = HttpProductCatalog(
        config=catalog_config, client_factory=_make_client_factory(handler)
    )

    async with catalog:
        with pytest.raises(PersistenceFailure):
            await catalog.get_by_code(CODE_WIDGET)


async def test_lookup_outside_context_is_rejected(catalog_config: CatalogApiConfig) -> None:
    catalog = HttpProductCatalog(config=catalog_config)

    with pytest.raises(RuntimeError):
        await catalog.get_by_code(CODE_WIDGET)


async def test_resolver_uses_catalog_concurrently(catalog_config: CatalogApiConfig) -> None:
    requests: list[httpx.Request] = []
    catalog = HttpProductCatalog(
        config=catalog_config, client_factory=_make_client_factory(_product_handler(requests))
    )

    async with catalog:
        resolver = ProductIdentityResolver(catalog, max_concurrency=3)
        resolution = await resolver.resolve_many([CODE_WIDGET, CODE_UNKNOWN, CODE_GADGET])

    assert [entry.code for entry in resolution.entries] == [CODE_WIDGET, CODE_UNKNOWN, CODE_GADGET]
    assert resolution.missing == (CODE_UNKNOWN,)
    assert resolution.product_id(CODE_GADGET) == GADGET.id
    assert len(requests) == 3


def test_catalog_config_is_optional(monkeypatch: pytest.MonkeyPatch) -> None:
    assert get_catalog_api_config() is None

    monkeypatch.setenv("ORDERBRIDGE_CATALOG_API_URL", BASE_URL)
    monkeypatch.setenv("ORDERBRIDGE_CATALOG_RATE_LIMIT", "5")
    config = get_catalog_api_config()

    assert config is not None
    assert config.base_url == BASE_URL
    assert config.resilience.ratelimit is not None
    assert config.resilience.ratelimit.max_calls == 5
    assert config.resilience.retry.allowed_methods == frozenset({"GET", "HEAD", "OPTIONS"})
