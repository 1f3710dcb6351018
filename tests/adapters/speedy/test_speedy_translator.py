from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from orderbridge.adapters.speedy import SpeedyOrderAdapter, SpeedyOrderPayload
from orderbridge.domain.errors import StructuralError
from orderbridge.domain.model import SPEEDY, Address, OrderStatus
from orderbridge.domain.ports import SupplierOrderAdapter
from tests.helpers.orders import CUSTOMER_ID, FIXED_NOW, GADGET, WIDGET, speedy_payload


@pytest.fixture
def adapter() -> SpeedyOrderAdapter:
    return SpeedyOrderAdapter(clock=lambda: FIXED_NOW)


def test_adapter_satisfies_port(adapter: SpeedyOrderAdapter) -> None:
    assert isinstance(adapter, SupplierOrderAdapter)
    assert adapter.resolutions is None


async def test_adapt_maps_numeric_ids_and_addresses(adapter: SpeedyOrderAdapter) -> None:
    order = await adapter.adapt(speedy_payload())

    assert order.id is None
    assert order.supplier_id == SPEEDY.id
    assert order.customer_id == CUSTOMER_ID
    assert order.customer_email is None
    assert order.status is OrderStatus.RECEIVED
    assert order.order_date == datetime(2024, 2, 10, 14, tzinfo=UTC)
    assert order.billing_address == Address(
        street="1 High Street",
        city="Leeds",
        county="West Yorkshire",
        postal_code="LS1 1AA",
        country="UK",
    )
    assert order.delivery_address is not None
    assert order.delivery_address.street == "2 Low Road"
    assert [(i.product_id, i.quantity, i.price) for i in order.items] == [
        (WIDGET.id, 2, Decimal("9.99")),
        (GADGET.id, 1, Decimal("4.5")),
    ]
    assert order.item_count == 2
    assert order.total_amount == Decimal("24.48")


async def test_missing_timestamp_uses_clock(adapter: SpeedyOrderAdapter) -> None:
    payload = speedy_payload()
    del payload["orderTimestamp"]

    order = await adapter.adapt(payload)

    assert order.order_date == FIXED_NOW


async def test_naive_timestamp_is_read_as_utc(adapter: SpeedyOrderAdapter) -> None:
    order = await adapter.adapt(speedy_payload(orderTimestamp="2024-02-10T14:00:00"))

    assert order.order_date == datetime(2024, 2, 10, 14, tzinfo=UTC)


async def test_offset_timestamp_is_converted_to_utc(adapter: SpeedyOrderAdapter) -> None:
    order = await adapter.adapt(speedy_payload(orderTimestamp="2024-02-10T16:00:00+02:00"))

    assert order.order_date == datetime(2024, 2, 10, 14, tzinfo=UTC)
    assert order.order_date.tzinfo is UTC


async def test_payload_cannot_override_supplier_or_status(adapter: SpeedyOrderAdapter) -> None:
    order = await adapter.adapt(
        speedy_payload(supplierId=99, orderStatus="Delivered", status="Dispatched")
    )

    assert order.supplier_id == SPEEDY.id
    assert order.status is OrderStatus.RECEIVED


async def test_ship_to_is_optional(adapter: SpeedyOrderAdapter) -> None:
    payload = speedy_payload()
    del payload["shipTo"]

    order = await adapter.adapt(payload)

    assert order.delivery_address is None
    assert order.billing_address is not None


async def test_adapt_is_repeatable(adapter: SpeedyOrderAdapter) -> None:
    first = await adapter.adapt(speedy_payload())
    second = await adapter.adapt(speedy_payload())

    assert first.order_date == second.order_date
    assert first.billing_address == second.billing_address
    assert [(i.product_id, i.quantity, i.price) for i in first.items] == [
        (i.product_id, i.quantity, i.price) for i in second.items
    ]


async def test_adapt_accepts_validated_model(adapter: SpeedyOrderAdapter) -> None:
    model = SpeedyOrderPayload.model_validate(speedy_payload())

    order = await adapter.adapt(model)

    assert order.customer_id == CUSTOMER_ID


async def test_structural_errors_are_reported_together(adapter: SpeedyOrderAdapter) -> None:
    payload = speedy_payload(
        customerId=0,
        lineItems=[
            {"productId": WIDGET.id, "qty": 0, "unitPrice": 1},
            {"productId": GADGET.id, "qty": 1, "unitPrice": -0.01},
        ],
        priority="teleport",
    )
    del payload["billTo"]

    with pytest.raises(StructuralError) as exc:
        await adapter.adapt(payload)

    fields = set(exc.value.to_dict())
    assert {
        "customerId",
        "billTo",
        "lineItems[0].qty",
        "lineItems[1].unitPrice",
        "priority",
    } <= fields


async def test_ids_beyond_integer_range_are_rejected(adapter: SpeedyOrderAdapter) -> None:
    payload = speedy_payload(
        customerId=2**70,
        lineItems=[{"productId": 2**63, "qty": 2**64, "unitPrice": 1}],
    )

    with pytest.raises(StructuralError) as exc:
        await adapter.adapt(payload)

    assert set(exc.value.to_dict()) == {
        "customerId",
        "lineItems[0].productId",
        "lineItems[0].qty",
    }


async def test_empty_line_items_are_rejected(adapter: SpeedyOrderAdapter) -> None:
    with pytest.raises(StructuralError) as exc:
        await adapter.adapt(speedy_payload(lineItems=[]))

    assert "lineItems" in exc.value.to_dict()


async def test_blank_street_is_rejected(adapter: SpeedyOrderAdapter) -> None:
    payload = speedy_payload()
    payload["billTo"] = {**payload["billTo"], "streetAddress": "   "}

    with pytest.raises(StructuralError) as exc:
        await adapter.adapt(payload)

    assert "billTo.streetAddress" in exc.value.to_dict()


async def test_non_object_payload_is_rejected(adapter: SpeedyOrderAdapter) -> None:
    with pytest.raises(StructuralError) as exc:
        await adapter.adapt(["not", "an", "object"])

    assert exc.value.to_dict() == {"payload": ["Expected a JSON object, got list."]}
