from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import func, select

from orderbridge.adapters.speedy import speedy_adapter_factory
from orderbridge.adapters.sqlalchemy.mappings import purchase_order_table
from orderbridge.adapters.vault import vault_adapter_factory
from orderbridge.domain.errors import ReferenceNotFound, StructuralError
from orderbridge.domain.ingestion import OrderIngestionService
from orderbridge.domain.model import SPEEDY, VAULT, OrderStatus, SupplierTag
from orderbridge.domain.ordering import OrderService
from tests.helpers.orders import (
    CODE_UNKNOWN,
    CUSTOMER_EMAIL,
    CUSTOMER_ID,
    GADGET,
    WIDGET,
    speedy_payload,
    vault_payload,
    violation_fields,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from orderbridge.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork
    from tests.conftest import SeededCatalog


@pytest.fixture
def ingestion(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork], seeded_catalog: SeededCatalog
) -> OrderIngestionService:
    _ = seeded_catalog
    return OrderIngestionService(
        sqlite_unit_of_work,
        {SupplierTag.SPEEDY: speedy_adapter_factory, SupplierTag.VAULT: vault_adapter_factory},
    )


async def _order_count(session_factory: async_sessionmaker[AsyncSession]) -> int:
    async with session_factory() as session:
        count = await session.scalar(select(func.count()).select_from(purchase_order_table))
    return count or 0


async def test_vault_order_is_resolved_and_stored(
    ingestion: OrderIngestionService,
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    ingested = await ingestion.ingest("vault", vault_payload())

    order = ingested.order
    assert order.id is not None
    assert ingested.supplier is VAULT
    assert ingested.reference == f"VAULT-{order.id}"
    assert order.customer_email == CUSTOMER_EMAIL
    assert order.customer_id is None
    assert order.status is OrderStatus.RECEIVED
    assert ingested.resolutions is not None
    assert ingested.resolutions.missing == ()

    stored = await OrderService(sqlite_unit_of_work).get_by_id(order.id)
    assert stored is not None
    assert stored.total_amount == Decimal("33.48")
    assert stored.item_count == 2
    assert [item.product_id for item in stored.items] == [WIDGET.id, GADGET.id]


async def test_vault_email_is_stored_as_sent(
    ingestion: OrderIngestionService,
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    ingested = await ingestion.ingest("vault", vault_payload(customerEmail="Buyer@Example.COM"))
    assert ingested.order.id is not None

    stored = await OrderService(sqlite_unit_of_work).get_by_id(ingested.order.id)

    assert stored is not None
    assert stored.customer_email == "Buyer@Example.COM"


async def test_oversized_speedy_customer_is_structural(
    ingestion: OrderIngestionService,
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    with pytest.raises(StructuralError) as exc:
        await ingestion.ingest("speedy", speedy_payload(customerId=2**70))

    assert violation_fields(exc.value.violations) == ["customerId"]
    assert await _order_count(session_factory) == 0


async def test_speedy_order_is_stored_with_reference(ingestion: OrderIngestionService) -> None:
    ingested = await ingestion.ingest(SupplierTag.SPEEDY, speedy_payload())

    assert ingested.supplier is SPEEDY
    assert ingested.reference == f"SPEEDY-{ingested.order.id}"
    assert ingested.order.customer_id == CUSTOMER_ID
    assert ingested.order.total_amount == Decimal("24.48")
    assert ingested.resolutions is None


async def test_unknown_customer_is_rejected_without_writing(
    ingestion: OrderIngestionService, session_factory: async_sessionmaker[AsyncSession]
) -> None:
    with pytest.raises(ReferenceNotFound) as exc:
        await ingestion.ingest("speedy", speedy_payload(customerId=404))

    assert violation_fields(exc.value.violations) == ["customerId"]
    assert await _order_count(session_factory) == 0


async def test_unknown_product_id_is_reported_per_item(
    ingestion: OrderIngestionService, session_factory: async_sessionmaker[AsyncSession]
) -> None:
    payload = speedy_payload(
        lineItems=[
            {"productId": WIDGET.id, "qty": 1, "unitPrice": 1},
            {"productId": 77, "qty": 1, "unitPrice": 1},
        ]
    )

    with pytest.raises(ReferenceNotFound) as exc:
        await ingestion.ingest("speedy", payload)

    assert exc.value.to_dict() == {
        "orderItems[1].productId": ["Product with ID 77 does not exist."]
    }
    assert await _order_count(session_factory) == 0


async def test_unknown_product_code_is_rejected_without_writing(
    ingestion: OrderIngestionService, session_factory: async_sessionmaker[AsyncSession]
) -> None:
    payload = vault_payload(
        items=[{"productCode": str(CODE_UNKNOWN), "quantityOrdered": 1, "pricePerUnit": 1}]
    )

    with pytest.raises(ReferenceNotFound):
        await ingestion.ingest("vault", payload)

    assert await _order_count(session_factory) == 0


async def test_structural_problems_are_rejected_without_writing(
    ingestion: OrderIngestionService, session_factory: async_sessionmaker[AsyncSession]
) -> None:
    with pytest.raises(StructuralError):
        await ingestion.ingest("vault", vault_payload(customerEmail="nope"))

    assert await _order_count(session_factory) == 0


async def test_transform_does_not_store(
    ingestion: OrderIngestionService, session_factory: async_sessionmaker[AsyncSession]
) -> None:
    transformed = await ingestion.transform("vault", vault_payload())

    assert transformed.order.id is None
    assert transformed.supplier is VAULT
    assert transformed.order.total_amount == Decimal("33.48")
    assert await _order_count(session_factory) == 0


async def test_transform_skips_validation(ingestion: OrderIngestionService) -> None:
    transformed = await ingestion.transform("speedy", speedy_payload(customerId=404))

    assert transformed.order.customer_id == 404


async def test_unregistered_supplier_is_refused(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    service = OrderIngestionService(
        sqlite_unit_of_work, {SupplierTag.SPEEDY: speedy_adapter_factory}
    )

    assert service.suppliers == (SPEEDY,)
    with pytest.raises(ValueError, match="VAULT"):
        await service.transform("vault", vault_payload())
    with pytest.raises(ValueError, match="Unknown supplier"):
        await service.transform("acme", {})
