"""The canonical order aggregate every supplier format normalizes into."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

from orderbridge.domain.model.enums import OrderStatus

if TYPE_CHECKING:
    from datetime import datetime

    from orderbridge.domain.model.catalog import Product, Supplier


@dataclass(frozen=True, slots=True)
class Address:
    street: str
    city: str | None = None
    county: str | None = None
    postal_code: str | None = None
    country: str | None = None


@dataclass(eq=False, kw_only=True)
class OrderItem:
    id: int | None = None
    order_id: int | None = None
    product_id: int
    quantity: int
    price: Decimal

    if TYPE_CHECKING:
        # mapped relationship, populated only by related-data reads
        product: Product | None

    @property
    def line_total(self) -> Decimal:
        return self.quantity * self.price


@dataclass(eq=False, kw_only=True)
class Order:
    """Aggregate root.

    A customer is identified by ``customer_id``, ``customer_email`` or both.
    ``total_amount`` is always derived from the items and never stored.
    """

    id: int | None = None
    customer_id: int | None = None
    customer_email: str | None = None
    supplier_id: int
    order_date: datetime | None
    status: OrderStatus = OrderStatus.RECEIVED
    billing_address: Address | None
    delivery_address: Address | None = None
    items: list[OrderItem] = field(default_factory=list["OrderItem"])

    if TYPE_CHECKING:
        # mapped relationship, populated only by related-data reads
        supplier: Supplier | None

    @property
    def total_amount(self) -> Decimal:
        return sum((item.line_total for item in self.items), start=Decimal(0))

    @property
    def item_count(self) -> int:
        return len(self.items)
