"""Translate Speedy payloads into canonical orders."""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from orderbridge.adapters.payloads import parse_payload
from orderbridge.domain.model import SPEEDY, Address, Order, OrderItem, OrderStatus

from .schema import SpeedyAddress, SpeedyOrderPayload

if TYPE_CHECKING:
    from collections.abc import Callable

    from orderbridge.domain.model import SupplierRef
    from orderbridge.domain.ports.persistence import ProductLookup
    from orderbridge.domain.resolution import ProductResolution


log = getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class SpeedyOrderAdapter:
    """Speedy shares our numeric customer and product ids, so no lookups are needed."""

    supplier: SupplierRef = SPEEDY
    resolutions: ProductResolution | None = None

    def __init__(self, *, clock: Callable[[], datetime] = _utc_now) -> None:
        self._clock = clock

    async def adapt(self, payload: object) -> Order:
        return self.translate(parse_payload(SpeedyOrderPayload, payload))

    def translate(self, payload: SpeedyOrderPayload) -> Order:
        return Order(
            customer_id=payload.customer_id,
            customer_email=None,
            supplier_id=self.supplier.id,
            order_date=self._order_date(payload.order_timestamp),
            status=OrderStatus.RECEIVED,
            billing_address=_to_address(payload.bill_to),
            delivery_address=_to_address(payload.ship_to) if payload.ship_to else None,
            items=[
                OrderItem(product_id=line.product_id, quantity=line.qty, price=line.unit_price)
                for line in payload.line_items
            ],
        )

    def _order_date(self, timestamp: datetime | None) -> datetime:
        if timestamp is None:
            log.debug("Speedy order has no timestamp, using the current time")
            return self._clock()
        if timestamp.tzinfo is None:
            return timestamp.replace(tzinfo=UTC)
        return timestamp.astimezone(UTC)


def speedy_adapter_factory(lookup: ProductLookup) -> SpeedyOrderAdapter:
    _ = lookup
    return SpeedyOrderAdapter()


def _to_address(address: SpeedyAddress) -> Address:
    return Address(
        street=address.street_address,
        city=address.city,
        county=address.region,
        postal_code=address.post_code,
        country=address.country,
    )
