"""Translate Vault payloads into canonical orders, resolving product codes on the way."""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from orderbridge.adapters.payloads import parse_payload
from orderbridge.domain.errors import ReferenceNotFound, Violation
from orderbridge.domain.model import VAULT, Address, Order, OrderItem, OrderStatus
from orderbridge.domain.resolution import ProductIdentityResolver

from .schema import VaultLocation, VaultOrderPayload

if TYPE_CHECKING:
    from orderbridge.domain.model import SupplierRef
    from orderbridge.domain.ports.persistence import ProductLookup
    from orderbridge.domain.resolution import ProductResolution


log = getLogger(__name__)


class VaultOrderAdapter:
    """Vault identifies customers by email and products by UUID code.

    Every distinct code is resolved once. A single unknown code fails the whole
    order; items are never dropped.
    """

    supplier: SupplierRef = VAULT

    def __init__(self, resolver: ProductIdentityResolver) -> None:
        self._resolver = resolver
        self.resolutions: ProductResolution | None = None

    async def adapt(self, payload: object) -> Order:
        parsed = parse_payload(VaultOrderPayload, payload)
        self.resolutions = None
        resolution = await self._resolver.resolve_many(item.product_code for item in parsed.items)
        self.resolutions = resolution

        missing = set(resolution.missing)
        if missing:
            log.warning("Rejecting Vault order with %d unknown product code(s)", len(missing))
            raise ReferenceNotFound(
                Violation.reference(
                    f"items[{index}].productCode",
                    f"Product with code {item.product_code} does not exist.",
                )
                for index, item in enumerate(parsed.items)
                if item.product_code in missing
            )

        items: list[OrderItem] = []
        for item in parsed.items:
            product_id = resolution.product_id(item.product_code)
            if product_id is None:  # pragma: no cover - guarded by the missing check
                raise RuntimeError(f"unresolved product code {item.product_code}")
            items.append(
                OrderItem(
                    product_id=product_id,
                    quantity=item.quantity_ordered,
                    price=item.price_per_unit,
                )
            )

        details = parsed.delivery_details
        return Order(
            customer_id=None,
            customer_email=parsed.customer_email,
            supplier_id=self.supplier.id,
            order_date=datetime.fromtimestamp(parsed.placed_at, tz=UTC),
            status=OrderStatus.RECEIVED,
            billing_address=_to_address(details.billing_location),
            delivery_address=(
                _to_address(details.shipping_location) if details.shipping_location else None
            ),
            items=items,
        )


def vault_adapter_factory(lookup: ProductLookup, *, max_concurrency: int = 1) -> VaultOrderAdapter:
    return VaultOrderAdapter(ProductIdentityResolver(lookup, max_concurrency=max_concurrency))


def _to_address(location: VaultLocation) -> Address:
    return Address(
        street=location.address_line,
        city=location.city_name,
        county=location.state_province,
        postal_code=location.zip_postal,
        country=location.country_code,
    )
