"""Order persistence service: atomic writes and split-loaded reads of the order aggregate."""

from __future__ import annotations

import math
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from orderbridge.domain.errors import StructuralError, Violation
from orderbridge.domain.validation import MAX_STORED_INTEGER

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from orderbridge.domain.model import Order
    from orderbridge.domain.ports.unit_of_work import OrderUnitOfWork


log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class OrderPage:
    items: Sequence[Order]
    total_count: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size)


class OrderService:
    """Stores and reads orders; every call runs in its own unit of work.

    Reads return orders sorted newest first (``order_date`` then ``id``, both
    descending). Items are always loaded; ``include_related`` also loads the
    supplier and the product of every item.
    """

    def __init__(self, unit_of_work_factory: Callable[[], OrderUnitOfWork]) -> None:
        self._uow_factory = unit_of_work_factory

    async def create(self, order: Order) -> Order:
        async with self._uow_factory() as uow:
            uow.repositories.orders.add(order)
            await uow.commit()
        log.info("Created order %s with %d item(s)", order.id, order.item_count)
        return order

    async def get_by_id(self, order_id: int, *, include_related: bool = False) -> Order | None:
        if not _storable_id(order_id):
            return None
        async with self._uow_factory() as uow:
            return await uow.repositories.orders.get(order_id, include_related=include_related)

    async def list_all(self, *, include_related: bool = False) -> Sequence[Order]:
        async with self._uow_factory() as uow:
            return await uow.repositories.orders.list(include_related=include_related)

    async def get_paged(
        self, page: int, page_size: int, *, include_related: bool = False
    ) -> OrderPage:
        violations: list[Violation] = []
        if page < 1:
            violations.append(Violation("page", "Page must be greater than or equal to 1."))
        if page_size < 1:
            violations.append(Violation("pageSize", "PageSize must be greater than or equal to 1."))
        elif page_size > MAX_STORED_INTEGER:
            violations.append(Violation("pageSize", "PageSize is out of range."))
        elif page > 1 and (page - 1) * page_size > MAX_STORED_INTEGER:
            violations.append(Violation("page", "Page is beyond the last addressable row."))
        if violations:
            raise StructuralError(violations)

        async with self._uow_factory() as uow:
            orders = uow.repositories.orders
            total = await orders.count()
            items = await orders.page(
                offset=(page - 1) * page_size, limit=page_size, include_related=include_related
            )
        return OrderPage(items=items, total_count=total, page=page, page_size=page_size)

    async def get_by_customer_id(
        self, customer_id: int, *, include_related: bool = False
    ) -> Sequence[Order]:
        if not _storable_id(customer_id):
            return []
        async with self._uow_factory() as uow:
            return await uow.repositories.orders.list(
                customer_id=customer_id, include_related=include_related
            )

    async def get_by_supplier_id(
        self, supplier_id: int, *, include_related: bool = False
    ) -> Sequence[Order]:
        if not _storable_id(supplier_id):
            return []
        async with self._uow_factory() as uow:
            return await uow.repositories.orders.list(
                supplier_id=supplier_id, include_related=include_related
            )

    async def delete(self, order_id: int) -> bool:
        """Delete an order together with its items; ``False`` if it does not exist."""

        if not _storable_id(order_id):
            return False
        async with self._uow_factory() as uow:
            orders = uow.repositories.orders
            order = await orders.get(order_id)
            if order is None:
                return False
            await orders.delete(order)
            await uow.commit()
        log.info("Deleted order %s", order_id)
        return True


def _storable_id(value: int) -> bool:
    # Ids outside the INTEGER column range can never match a row.
    return 1 <= value <= MAX_STORED_INTEGER
