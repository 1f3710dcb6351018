"""Ports for turning supplier payloads into canonical orders."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable

    from orderbridge.domain.model import Order, SupplierRef
    from orderbridge.domain.ports.persistence import ProductLookup
    from orderbridge.domain.resolution import ProductResolution


@runtime_checkable
class SupplierOrderAdapter(Protocol):
    """Maps one supplier's payload format onto the canonical ``Order``.

    ``supplier`` is fixed per implementation; payloads cannot choose it.
    ``resolutions`` holds the product-code lookups made by the latest ``adapt``
    call, or ``None`` for formats that already use canonical product ids.
    """

    supplier: SupplierRef
    resolutions: ProductResolution | None

    async def adapt(self, payload: object) -> Order: ...


type AdapterFactory = Callable[[ProductLookup], SupplierOrderAdapter]
