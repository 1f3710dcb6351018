"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class OrderStatus(StrEnum):
    """Fulfilment state of an order. Ingested orders always start as ``RECEIVED``."""

    RECEIVED = "Received"
    PICKING = "Picking"
    DISPATCHED = "Dispatched"
    DELIVERED = "Delivered"


class SupplierTag(StrEnum):
    """External suppliers with a dedicated payload format."""

    SPEEDY = "SPEEDY"
    VAULT = "VAULT"


class ViolationKind(StrEnum):
    STRUCTURAL = "structural"
    REFERENCE = "reference"
