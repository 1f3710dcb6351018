"""Supplier order ingestion: adapt, validate and persist in one unit of work."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from orderbridge.domain.model import supplier_ref
from orderbridge.domain.validation import OrderValidator

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from orderbridge.domain.model import Order, SupplierRef, SupplierTag
    from orderbridge.domain.ports.ingestion import AdapterFactory, SupplierOrderAdapter
    from orderbridge.domain.ports.persistence import ProductLookup
    from orderbridge.domain.ports.unit_of_work import OrderUnitOfWork
    from orderbridge.domain.resolution import ProductResolution


log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TransformedOrder:
    order: Order
    supplier: SupplierRef
    resolutions: ProductResolution | None = None


@dataclass(frozen=True, slots=True)
class IngestedOrder:
    order: Order
    supplier: SupplierRef
    reference: str
    resolutions: ProductResolution | None = None


class OrderIngestionService:
    """Entry point for supplier payloads.

    ``adapters`` maps each supported supplier to a factory building its payload
    adapter around a product lookup. Lookups go to ``catalog`` when one is
    given (e.g. a remote product API) and to the unit of work's product
    repository otherwise.
    """

    def __init__(
        self,
        unit_of_work_factory: Callable[[], OrderUnitOfWork],
        adapters: Mapping[SupplierTag, AdapterFactory],
        *,
        catalog: ProductLookup | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._adapters = dict(adapters)
        self._catalog = catalog

    @property
    def suppliers(self) -> tuple[SupplierRef, ...]:
        return tuple(supplier_ref(tag) for tag in self._adapters)

    async def transform(self, supplier: SupplierTag | str, payload: object) -> TransformedOrder:
        """Map ``payload`` onto the canonical order without validating or storing it."""

        async with self._uow_factory() as uow:
            adapter = self._adapter_for(supplier, uow.repositories.products)
            order = await adapter.adapt(payload)
        return TransformedOrder(
            order=order, supplier=adapter.supplier, resolutions=adapter.resolutions
        )

    async def ingest(self, supplier: SupplierTag | str, payload: object) -> IngestedOrder:
        """Adapt, validate and store ``payload``; nothing is written when any step fails."""

        async with self._uow_factory() as uow:
            repositories = uow.repositories
            adapter = self._adapter_for(supplier, repositories.products)
            order = await adapter.adapt(payload)

            validator = OrderValidator(
                customers=repositories.customers,
                suppliers=repositories.suppliers,
                products=repositories.products,
            )
            result = await validator.validate(order)
            if not result.is_valid:
                log.info(
                    "Rejected %s order with %d violation(s)",
                    adapter.supplier.name,
                    len(result.violations),
                )
            result.raise_for_violations()

            repositories.orders.add(order)
            await uow.commit()

        if order.id is None:
            raise RuntimeError("order id was not assigned on commit")
        reference = adapter.supplier.order_reference(order.id)
        log.info(
            "Ingested %s (%d item(s), total %s)", reference, order.item_count, order.total_amount
        )
        return IngestedOrder(
            order=order,
            supplier=adapter.supplier,
            reference=reference,
            resolutions=adapter.resolutions,
        )

    def _adapter_for(
        self, supplier: SupplierTag | str, products: ProductLookup
    ) -> SupplierOrderAdapter:
        tag = supplier_ref(supplier).tag
        try:
            factory = self._adapters[tag]
        except KeyError:
            raise ValueError(f"No adapter registered for supplier {tag.value}") from None
        return factory(self._catalog or products)
