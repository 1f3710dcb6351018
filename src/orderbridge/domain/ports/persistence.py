"""Ports for persisting and looking up domain aggregates.

Each collaborator is a narrow capability so services and tests depend only on
what they actually call.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from orderbridge.domain.model import Customer, Order, Product, ProductIdentity, Supplier


@runtime_checkable
class CustomerExistence(Protocol):
    async def exists(self, customer_id: int) -> bool: ...


@runtime_checkable
class SupplierExistence(Protocol):
    async def exists(self, supplier_id: int) -> bool: ...


@runtime_checkable
class ProductExistence(Protocol):
    async def exists(self, product_id: int) -> bool: ...


@runtime_checkable
class ProductLookup(Protocol):
    """Resolve a supplier-facing product code; ``None`` means the code is unknown."""

    async def get_by_code(self, code: UUID) -> ProductIdentity | None: ...


@runtime_checkable
class CustomerRepository(CustomerExistence, Protocol):
    async def add(self, customer: Customer) -> None: ...

    async def email_exists(self, email: str) -> bool: ...


@runtime_checkable
class SupplierRepository(SupplierExistence, Protocol):
    async def get(self, supplier_id: int) -> Supplier | None: ...


@runtime_checkable
class ProductRepository(ProductExistence, ProductLookup, Protocol):
    async def add(self, product: Product) -> None: ...

    async def code_exists(self, code: UUID) -> bool: ...


@runtime_checkable
class OrderRepository(Protocol):
    """Persistence contract for the order aggregate (root and items together)."""

    def add(self, order: Order) -> None: ...

    async def get(self, order_id: int, *, include_related: bool = False) -> Order | None: ...

    async def list(
        self,
        *,
        customer_id: int | None = None,
        supplier_id: int | None = None,
        include_related: bool = False,
    ) -> Sequence[Order]: ...

    async def page(
        self, *, offset: int, limit: int, include_related: bool = False
    ) -> Sequence[Order]: ...

    async def count(self) -> int: ...

    async def delete(self, order: Order) -> None: ...
