"""Resolve supplier-facing product codes to canonical product identities."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID

    from orderbridge.domain.model import ProductIdentity
    from orderbridge.domain.ports.persistence import ProductLookup


log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ResolvedCode:
    code: UUID
    product: ProductIdentity | None


@dataclass(frozen=True, slots=True)
class ProductResolution:
    """Outcome of resolving a batch of codes, in first-seen request order."""

    entries: tuple[ResolvedCode, ...]

    @property
    def resolved(self) -> dict[UUID, ProductIdentity]:
        return {e.code: e.product for e in self.entries if e.product is not None}

    @property
    def missing(self) -> tuple[UUID, ...]:
        return tuple(e.code for e in self.entries if e.product is None)

    def product_id(self, code: UUID) -> int | None:
        product = self.resolved.get(code)
        return product.id if product is not None else None


class ProductIdentityResolver:
    """Read-only lookup of product codes against the catalog.

    Each distinct code is looked up once per ``resolve_many`` call. With
    ``max_concurrency > 1`` lookups run concurrently; the catalog behind
    ``lookup`` must then tolerate concurrent calls (a single database session
    does not).
    """

    def __init__(self, lookup: ProductLookup, *, max_concurrency: int = 1) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._lookup = lookup
        self._max_concurrency = max_concurrency

    async def resolve_by_code(self, code: UUID) -> ProductIdentity | None:
        return await self._lookup.get_by_code(code)

    async def resolve_many(self, codes: Iterable[UUID]) -> ProductResolution:
        distinct = list(dict.fromkeys(codes))
        if self._max_concurrency == 1 or len(distinct) < 2:
            products = [await self.resolve_by_code(code) for code in distinct]
        else:
            products = await self._resolve_concurrently(distinct)

        resolution = ProductResolution(
            entries=tuple(
                ResolvedCode(code=code, product=product)
                for code, product in zip(distinct, products, strict=True)
            )
        )
        for code in resolution.missing:
            log.warning("Product code %s could not be resolved", code)
        return resolution

    async def _resolve_concurrently(self, codes: list[UUID]) -> list[ProductIdentity | None]:
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def bounded(code: UUID) -> ProductIdentity | None:
            async with semaphore:
                return await self.resolve_by_code(code)

        try:
            async with asyncio.TaskGroup() as group:
                tasks = [group.create_task(bounded(code)) for code in codes]
        except ExceptionGroup as failures:
            # siblings are already cancelled; surface the first lookup failure as-is
            raise failures.exceptions[0] from failures
        return [task.result() for task in tasks]
