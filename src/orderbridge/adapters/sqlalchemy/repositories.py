"""Repository implementations backed by SQLAlchemy async sessions."""

from __future__ import annotations

from contextlib import contextmanager
from logging import getLogger
from typing import TYPE_CHECKING, cast

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from orderbridge.adapters.sqlalchemy.mappings import (
    customer_table,
    product_table,
    purchase_order_table,
    supplier_table,
)
from orderbridge.domain.errors import PersistenceFailure
from orderbridge.domain.model import Order, OrderItem, Product, ProductIdentity, Supplier

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from uuid import UUID

    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import InstrumentedAttribute
    from sqlalchemy.sql.base import ExecutableOption

    from orderbridge.domain.model import Customer


log = getLogger(__name__)


@contextmanager
def translate_storage_errors(action: str) -> Iterator[None]:
    """Re-raise driver and ORM failures as ``PersistenceFailure``."""

    try:
        yield
    except SQLAlchemyError as exc:
        log.exception("Storage failure while trying to %s", action)
        raise PersistenceFailure(f"Could not {action}") from exc


class SqlAlchemyOrderRepository:
    """Order aggregate storage.

    Items are always fetched with a second ``SELECT ... WHERE order_id IN``
    query, never joined, so a page of orders costs a fixed number of queries
    and no row multiplication.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def add(self, order: Order) -> None:
        self.session.add(order)

    async def get(self, order_id: int, *, include_related: bool = False) -> Order | None:
        stmt = self._select(include_related).where(purchase_order_table.c.id == order_id)
        with translate_storage_errors(f"load order {order_id}"):
            return (await self.session.execute(stmt)).scalar_one_or_none()

    async def list(
        self,
        *,
        customer_id: int | None = None,
        supplier_id: int | None = None,
        include_related: bool = False,
    ) -> Sequence[Order]:
        stmt = self._select(include_related)
        if customer_id is not None:
            stmt = stmt.where(purchase_order_table.c.customer_id == customer_id)
        if supplier_id is not None:
            stmt = stmt.where(purchase_order_table.c.supplier_id == supplier_id)
        with translate_storage_errors("list orders"):
            return (await self.session.execute(stmt)).scalars().all()

    async def page(
        self, *, offset: int, limit: int, include_related: bool = False
    ) -> Sequence[Order]:
        stmt = self._select(include_related).offset(offset).limit(limit)
        with translate_storage_errors("load a page of orders"):
            return (await self.session.execute(stmt)).scalars().all()

    async def count(self) -> int:
        stmt = select(func.count()).select_from(purchase_order_table)
        with translate_storage_errors("count orders"):
            return (await self.session.execute(stmt)).scalar_one()

    async def delete(self, order: Order) -> None:
        with translate_storage_errors(f"delete order {order.id}"):
            await self.session.delete(order)

    @staticmethod
    def _select(include_related: bool) -> Select[tuple[Order]]:
        return (
            select(Order)
            .options(*_order_load_options(include_related))
            .order_by(purchase_order_table.c.order_date.desc(), purchase_order_table.c.id.desc())
        )


def _order_load_options(include_related: bool) -> list[ExecutableOption]:
    items = cast("InstrumentedAttribute[list[OrderItem]]", Order.items)
    if not include_related:
        return [selectinload(items)]
    product = cast("InstrumentedAttribute[Product | None]", OrderItem.product)
    supplier = cast("InstrumentedAttribute[Supplier | None]", Order.supplier)
    return [selectinload(items).selectinload(product), selectinload(supplier)]


class SqlAlchemyCustomerRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def add(self, customer: Customer) -> None:
        with translate_storage_errors("add customer"):
            self.session.add(customer)
            await self.session.flush()

    async def exists(self, customer_id: int) -> bool:
        stmt = select(customer_table.c.id).where(customer_table.c.id == customer_id)
        with translate_storage_errors(f"look up customer {customer_id}"):
            return (await self.session.execute(stmt)).scalar_one_or_none() is not None

    async def email_exists(self, email: str) -> bool:
        stmt = select(customer_table.c.id).where(
            func.lower(customer_table.c.email) == email.strip().lower()
        )
        with translate_storage_errors("look up customer email"):
            return (await self.session.execute(stmt)).first() is not None


class SqlAlchemySupplierRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def exists(self, supplier_id: int) -> bool:
        stmt = select(supplier_table.c.id).where(supplier_table.c.id == supplier_id)
        with translate_storage_errors(f"look up supplier {supplier_id}"):
            return (await self.session.execute(stmt)).scalar_one_or_none() is not None

    async def get(self, supplier_id: int) -> Supplier | None:
        with translate_storage_errors(f"load supplier {supplier_id}"):
            return await self.session.get(Supplier, supplier_id)


class SqlAlchemyProductRepository:
    """Product catalog reads; also serves as the default ``ProductLookup``."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def add(self, product: Product) -> None:
        with translate_storage_errors("add product"):
            self.session.add(product)
            await self.session.flush()

    async def exists(self, product_id: int) -> bool:
        stmt = select(product_table.c.id).where(product_table.c.id == product_id)
        with translate_storage_errors(f"look up product {product_id}"):
            return (await self.session.execute(stmt)).scalar_one_or_none() is not None

    async def code_exists(self, code: UUID) -> bool:
        return await self.get_by_code(code) is not None

    async def get_by_code(self, code: UUID) -> ProductIdentity | None:
        stmt = select(product_table.c.id, product_table.c.code, product_table.c.name).where(
            product_table.c.code == code
        )
        with translate_storage_errors(f"look up product code {code}"):
            row = (await self.session.execute(stmt)).one_or_none()
        if row is None:
            return None
        return ProductIdentity(id=row.id, code=row.code, name=row.name)
