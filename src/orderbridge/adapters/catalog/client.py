"""Product lookups against a remote catalog API (``GET /api/products/code/{code}``)."""

from __future__ import annotations

from http import HTTPStatus
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from orderbridge.adapters.http_resilience import ResilientClient
from orderbridge.domain.errors import PersistenceFailure
from orderbridge.domain.model import ProductIdentity

from .schema import CatalogProductPayload

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType
    from uuid import UUID

    from orderbridge.config.catalog import CatalogApiConfig
    from orderbridge.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

PRODUCT_BY_CODE_PATH = "api/products/code/{code}"


class HttpProductCatalog:
    """``ProductLookup`` backed by the catalog service.

    Use as an async context manager; one HTTP client (and rate limiter) is
    shared by every lookup made inside the block, so it is safe for
    concurrent resolution.
    """

    def __init__(
        self,
        *,
        config: CatalogApiConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._client_factory = client_factory or ResilientClient
        self._client: ResilientClient | None = None

    async def __aenter__(self) -> HttpProductCatalog:
        self._client = self._client_factory(self._config.resilience)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._client is not None:
            await self._client.aclose()
        self._client = None

    async def get_by_code(self, code: UUID) -> ProductIdentity | None:
        if self._client is None:
            raise RuntimeError("HttpProductCatalog must be used inside 'async with'")
        try:
            response = await self._client.get(PRODUCT_BY_CODE_PATH.format(code=code))
            if response.status_code == HTTPStatus.NOT_FOUND:
                return None
            response.raise_for_status()
            payload = CatalogProductPayload.model_validate(response.json())
        except httpx.HTTPError as exc:
            log.exception("Catalog lookup for product code %s failed", code)
            raise PersistenceFailure(f"Catalog lookup for product code {code} failed") from exc
        except (ValidationError, ValueError) as exc:
            raise PersistenceFailure(
                f"Catalog returned an unexpected payload for product code {code}"
            ) from exc

        if payload.product_code != code:
            raise PersistenceFailure(
                f"Catalog answered product code {payload.product_code} for {code}"
            )
        return ProductIdentity(id=payload.id, code=payload.product_code, name=payload.name)
