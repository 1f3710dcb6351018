"""camelCase response models returned by the application layer."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from decimal import Decimal  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from orderbridge.domain.model import KNOWN_SUPPLIERS, OrderStatus

if TYPE_CHECKING:
    from orderbridge.domain.ingestion import IngestedOrder, TransformedOrder
    from orderbridge.domain.model import Address, Customer, Order, OrderItem, Product
    from orderbridge.domain.ordering import OrderPage
    from orderbridge.domain.resolution import ProductResolution


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


class AddressView(CamelModel):
    street: str
    city: str | None = None
    county: str | None = None
    postal_code: str | None = None
    country: str | None = None

    @classmethod
    def from_address(cls, address: Address | None) -> AddressView | None:
        if address is None:
            return None
        return cls(
            street=address.street,
            city=address.city,
            county=address.county,
            postal_code=address.postal_code,
            country=address.country,
        )


class OrderItemView(CamelModel):
    id: int | None = None
    product_id: int
    product_code: UUID | None = None
    product_name: str | None = None
    quantity: int
    price: Decimal
    line_total: Decimal

    @classmethod
    def from_item(cls, item: OrderItem, *, include_related: bool = False) -> OrderItemView:
        product = item.product if include_related else None
        return cls(
            id=item.id,
            product_id=item.product_id,
            product_code=product.code if product is not None else None,
            product_name=product.name if product is not None else None,
            quantity=item.quantity,
            price=item.price,
            line_total=item.line_total,
        )


class OrderView(CamelModel):
    id: int | None = None
    customer_id: int | None = None
    customer_email: str | None = None
    supplier_id: int
    supplier_name: str | None = None
    order_date: datetime | None = None
    order_status: OrderStatus
    billing_address: AddressView | None = None
    delivery_address: AddressView | None = None
    order_items: list[OrderItemView]
    total_amount: Decimal
    item_count: int

    @classmethod
    def from_order(cls, order: Order, *, include_related: bool = False) -> OrderView:
        if include_related and order.supplier is not None:
            supplier_name: str | None = order.supplier.name
        else:
            supplier_name = _known_supplier_name(order.supplier_id)
        return cls(
            id=order.id,
            customer_id=order.customer_id,
            customer_email=order.customer_email,
            supplier_id=order.supplier_id,
            supplier_name=supplier_name,
            order_date=order.order_date,
            order_status=order.status,
            billing_address=AddressView.from_address(order.billing_address),
            delivery_address=AddressView.from_address(order.delivery_address),
            order_items=[
                OrderItemView.from_item(item, include_related=include_related)
                for item in order.items
            ],
            total_amount=order.total_amount,
            item_count=order.item_count,
        )


class ProductResolutionView(CamelModel):
    product_code: UUID
    product_id: int | None
    product_name: str | None
    resolved: bool

    @classmethod
    def from_resolution(cls, resolution: ProductResolution | None) -> list[ProductResolutionView]:
        if resolution is None:
            return []
        return [
            cls(
                product_code=entry.code,
                product_id=entry.product.id if entry.product else None,
                product_name=entry.product.name if entry.product else None,
                resolved=entry.product is not None,
            )
            for entry in resolution.entries
        ]


class TransformResponse(CamelModel):
    message: str
    transformed_order: OrderView
    product_code_resolution: list[ProductResolutionView] | None = None

    @classmethod
    def from_transformed(cls, transformed: TransformedOrder) -> TransformResponse:
        supplier = transformed.supplier
        return cls(
            message=f"{supplier.name} order transformed successfully",
            transformed_order=OrderView.from_order(transformed.order),
            product_code_resolution=(
                ProductResolutionView.from_resolution(transformed.resolutions)
                if transformed.resolutions is not None
                else None
            ),
        )


class IngestResponse(CamelModel):
    success: bool = True
    message: str
    order_id: int
    order_reference: str
    supplier: str
    supplier_id: int
    customer_id: int | None = None
    customer_email: str | None = None
    order_date: datetime | None
    order_status: OrderStatus
    total_amount: Decimal
    item_count: int
    product_resolutions: list[ProductResolutionView] | None = None

    @classmethod
    def from_ingested(cls, ingested: IngestedOrder) -> IngestResponse:
        order = ingested.order
        if order.id is None:
            raise ValueError("ingested order has no id")
        return cls(
            message=f"{ingested.supplier.name} order created successfully",
            order_id=order.id,
            order_reference=ingested.reference,
            supplier=ingested.supplier.name,
            supplier_id=ingested.supplier.id,
            customer_id=order.customer_id,
            customer_email=order.customer_email,
            order_date=order.order_date,
            order_status=order.status,
            total_amount=order.total_amount,
            item_count=order.item_count,
            product_resolutions=(
                ProductResolutionView.from_resolution(ingested.resolutions)
                if ingested.resolutions is not None
                else None
            ),
        )


class OrderPageView(CamelModel):
    items: list[OrderView]
    total_count: int
    page: int
    page_size: int
    total_pages: int

    @classmethod
    def from_page(cls, page: OrderPage, *, include_related: bool = False) -> OrderPageView:
        return cls(
            items=[OrderView.from_order(o, include_related=include_related) for o in page.items],
            total_count=page.total_count,
            page=page.page,
            page_size=page.page_size,
            total_pages=page.total_pages,
        )


class OrderListView(CamelModel):
    items: list[OrderView]
    count: int


class SupplierInfo(CamelModel):
    id: int
    name: str
    reference_prefix: str
    customer_identifier: str
    product_identifier: str
    address_format: str
    timestamp_format: str
    operations: list[str]


class CustomerView(CamelModel):
    id: int
    name: str
    email: str | None = None

    @classmethod
    def from_customer(cls, customer: Customer) -> CustomerView:
        if customer.id is None:
            raise ValueError("customer has no id")
        return cls(id=customer.id, name=customer.name, email=customer.email)


class ProductView(CamelModel):
    id: int
    product_code: UUID
    name: str

    @classmethod
    def from_product(cls, product: Product) -> ProductView:
        identity = product.identity()
        return cls(id=identity.id, product_code=identity.code, name=identity.name)


class DeleteResponse(CamelModel):
    order_id: int
    deleted: bool


def _known_supplier_name(supplier_id: int) -> str | None:
    for ref in KNOWN_SUPPLIERS.values():
        if ref.id == supplier_id:
            return ref.name
    return None
