"""Public domain model surface."""

from __future__ import annotations

from orderbridge.domain.model.catalog import (
    KNOWN_SUPPLIERS,
    SPEEDY,
    VAULT,
    Customer,
    Product,
    ProductIdentity,
    Supplier,
    SupplierRef,
    supplier_ref,
)
from orderbridge.domain.model.enums import OrderStatus, SupplierTag, ViolationKind
from orderbridge.domain.model.order import Address, Order, OrderItem

__all__ = [  # noqa: RUF022
    # order aggregate
    "Address",
    "Order",
    "OrderItem",
    # catalog
    "Customer",
    "Product",
    "ProductIdentity",
    "Supplier",
    "SupplierRef",
    "KNOWN_SUPPLIERS",
    "SPEEDY",
    "VAULT",
    "supplier_ref",
    # enums
    "OrderStatus",
    "SupplierTag",
    "ViolationKind",
]
