"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from orderbridge.domain.ports.persistence import (
        CustomerRepository,
        OrderRepository,
        ProductRepository,
        SupplierRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic async unit-of-work boundary around a repository collection.

    Leaving the context without ``commit`` discards every pending write.
    """

    @property
    def repositories(self) -> TRepositories: ...

    async def __aenter__(self) -> UnitOfWork[TRepositories]: ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


@dataclass(slots=True)
class OrderRepositories(RepositoryCollection):
    """Repositories required to ingest, validate and read orders."""

    orders: OrderRepository
    customers: CustomerRepository
    suppliers: SupplierRepository
    products: ProductRepository


type OrderUnitOfWork = UnitOfWork[OrderRepositories]
