"""Application orchestration entry points."""

from __future__ import annotations

import uuid
from collections.abc import Callable
from contextlib import asynccontextmanager
from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING

from orderbridge.adapters.catalog import HttpProductCatalog
from orderbridge.adapters.speedy import speedy_adapter_factory
from orderbridge.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from orderbridge.adapters.vault import vault_adapter_factory
from orderbridge.config import DEFAULT_PAGE, get_catalog_api_config, get_ingest_config
from orderbridge.domain.errors import ConflictError, ReferenceNotFound, StructuralError, Violation
from orderbridge.domain.ingestion import OrderIngestionService
from orderbridge.domain.model import Customer, Product, SupplierTag, supplier_ref
from orderbridge.domain.ordering import OrderService
from orderbridge.domain.ports.unit_of_work import OrderUnitOfWork
from orderbridge.domain.validation import check_email
from orderbridge.responses import (
    CustomerView,
    DeleteResponse,
    IngestResponse,
    OrderListView,
    OrderPageView,
    OrderView,
    ProductView,
    SupplierInfo,
    TransformResponse,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence

    from orderbridge.domain.model import Order
    from orderbridge.domain.ports.ingestion import AdapterFactory
    from orderbridge.domain.ports.persistence import ProductLookup

UnitOfWorkFactory = Callable[[], OrderUnitOfWork]


log = getLogger(__name__)


async def _unit_of_work_factory(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if factory is not None:
        return factory
    if not is_started():
        await startup()
    return SqlAlchemyUnitOfWork


def build_adapter_factories(
    *, resolver_concurrency: int = 1
) -> dict[SupplierTag, AdapterFactory]:
    """Adapter factory per supported supplier."""

    return {
        SupplierTag.SPEEDY: speedy_adapter_factory,
        SupplierTag.VAULT: partial(vault_adapter_factory, max_concurrency=resolver_concurrency),
    }


@asynccontextmanager
async def _ingestion_service(
    unit_of_work_factory: UnitOfWorkFactory | None,
    catalog: ProductLookup | None,
) -> AsyncIterator[OrderIngestionService]:
    factory = await _unit_of_work_factory(unit_of_work_factory)
    concurrency = get_ingest_config().resolver_concurrency

    if catalog is None:
        catalog_config = get_catalog_api_config()
        if catalog_config is not None:
            log.info("Resolving product codes through %s", catalog_config.base_url)
            async with HttpProductCatalog(config=catalog_config) as remote:
                yield OrderIngestionService(
                    factory,
                    build_adapter_factories(resolver_concurrency=concurrency),
                    catalog=remote,
                )
            return
        # database lookups share the unit of work's session and must stay sequential
        concurrency = 1

    yield OrderIngestionService(
        factory, build_adapter_factories(resolver_concurrency=concurrency), catalog=catalog
    )


async def transform_supplier_order(
    supplier: SupplierTag | str,
    payload: object,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    catalog: ProductLookup | None = None,
) -> TransformResponse:
    """Map a supplier payload onto the canonical order without storing it."""

    async with _ingestion_service(unit_of_work_factory, catalog) as service:
        transformed = await service.transform(supplier, payload)
    return TransformResponse.from_transformed(transformed)


async def ingest_supplier_order(
    supplier: SupplierTag | str,
    payload: object,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    catalog: ProductLookup | None = None,
) -> IngestResponse:
    """Transform, validate and persist a supplier payload."""

    async with _ingestion_service(unit_of_work_factory, catalog) as service:
        ingested = await service.ingest(supplier, payload)
    return IngestResponse.from_ingested(ingested)


async def list_orders(
    *,
    include_related: bool = False,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> OrderListView:
    service = OrderService(await _unit_of_work_factory(unit_of_work_factory))
    orders = await service.list_all(include_related=include_related)
    return _order_list(orders, include_related=include_related)


async def get_order(
    order_id: int,
    *,
    include_related: bool = True,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> OrderView | None:
    service = OrderService(await _unit_of_work_factory(unit_of_work_factory))
    order = await service.get_by_id(order_id, include_related=include_related)
    if order is None:
        return None
    return OrderView.from_order(order, include_related=include_related)


async def list_customer_orders(
    customer_id: int,
    *,
    include_related: bool = False,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> OrderListView:
    """Orders of one customer; unknown customers are a ``ReferenceNotFound``."""

    factory = await _unit_of_work_factory(unit_of_work_factory)
    async with factory() as uow:
        known = await uow.repositories.customers.exists(customer_id)
    if not known:
        raise ReferenceNotFound(
            [
                Violation.reference(
                    "customerId", f"Customer with ID {customer_id} does not exist."
                )
            ]
        )
    orders = await OrderService(factory).get_by_customer_id(
        customer_id, include_related=include_related
    )
    return _order_list(orders, include_related=include_related)


async def list_supplier_orders(
    supplier_id: int,
    *,
    include_related: bool = False,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> OrderListView:
    """Orders placed through one supplier; unknown suppliers are a ``ReferenceNotFound``."""

    factory = await _unit_of_work_factory(unit_of_work_factory)
    async with factory() as uow:
        known = await uow.repositories.suppliers.exists(supplier_id)
    if not known:
        raise ReferenceNotFound(
            [
                Violation.reference(
                    "supplierId", f"Supplier with ID {supplier_id} does not exist."
                )
            ]
        )
    orders = await OrderService(factory).get_by_supplier_id(
        supplier_id, include_related=include_related
    )
    return _order_list(orders, include_related=include_related)


async def list_orders_paged(
    page: int = DEFAULT_PAGE,
    page_size: int | None = None,
    *,
    include_related: bool = False,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> OrderPageView:
    effective_size = page_size if page_size is not None else get_ingest_config().default_page_size
    service = OrderService(await _unit_of_work_factory(unit_of_work_factory))
    result = await service.get_paged(page, effective_size, include_related=include_related)
    return OrderPageView.from_page(result, include_related=include_related)


async def delete_order(
    order_id: int,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> DeleteResponse:
    service = OrderService(await _unit_of_work_factory(unit_of_work_factory))
    deleted = await service.delete(order_id)
    return DeleteResponse(order_id=order_id, deleted=deleted)


_SUPPLIER_FORMATS: dict[SupplierTag, dict[str, str]] = {
    SupplierTag.SPEEDY: {
        "customer_identifier": "customerId (numeric)",
        "product_identifier": "productId (numeric, canonical)",
        "address_format": "billTo / shipTo",
        "timestamp_format": "orderTimestamp (ISO 8601, defaults to now)",
    },
    SupplierTag.VAULT: {
        "customer_identifier": "customerEmail",
        "product_identifier": "productCode (UUID, resolved to productId)",
        "address_format": "deliveryDetails.billingLocation / shippingLocation",
        "timestamp_format": "placedAt (Unix epoch seconds, UTC)",
    },
}


def supported_suppliers() -> list[SupplierInfo]:
    """Describe the payload format of every supported supplier."""

    suppliers: list[SupplierInfo] = []
    for tag, details in _SUPPLIER_FORMATS.items():
        ref = supplier_ref(tag)
        name = tag.value.lower()
        suppliers.append(
            SupplierInfo(
                id=ref.id,
                name=ref.name,
                reference_prefix=f"{ref.tag}-",
                operations=[f"transform {name}", f"ingest {name}"],
                **details,
            )
        )
    return suppliers


async def add_customer(
    name: str,
    email: str | None = None,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> CustomerView:
    """Register a customer; email addresses are unique."""

    normalized = email.strip() if email else None
    if normalized:
        problem = check_email(normalized)
        if problem is not None:
            raise StructuralError([Violation("email", problem)])

    factory = await _unit_of_work_factory(unit_of_work_factory)
    async with factory() as uow:
        customers = uow.repositories.customers
        if normalized and await customers.email_exists(normalized):
            raise ConflictError(f"A customer with email {normalized} already exists")
        customer = Customer(name=name, email=normalized or None)
        await customers.add(customer)
        await uow.commit()
    log.info("Added customer %s", customer.id)
    return CustomerView.from_customer(customer)


async def add_product(
    name: str,
    code: uuid.UUID | None = None,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ProductView:
    """Register a product; codes are immutable and unique."""

    factory = await _unit_of_work_factory(unit_of_work_factory)
    async with factory() as uow:
        products = uow.repositories.products
        product = Product(code=code or uuid.uuid4(), name=name)
        if await products.code_exists(product.code):
            raise ConflictError(f"A product with code {product.code} already exists")
        await products.add(product)
        await uow.commit()
    log.info("Added product %s (%s)", product.id, product.code)
    return ProductView.from_product(product)


def _order_list(orders: Sequence[Order], *, include_related: bool) -> OrderListView:
    return OrderListView(
        items=[OrderView.from_order(order, include_related=include_related) for order in orders],
        count=len(orders),
    )
