"""Pydantic models describing Speedy order payloads."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime  # noqa: TC003
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import Field, StringConstraints, field_validator

from orderbridge.adapters.payloads import SupplierBaseModel
from orderbridge.domain.validation import MAX_STORED_INTEGER

Priority = Literal["standard", "express", "overnight"]
Street = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]


class SpeedyAddress(SupplierBaseModel):
    street_address: Street
    city: str | None = None
    region: str | None = None
    post_code: str | None = None
    country: str | None = None


class SpeedyLineItem(SupplierBaseModel):
    product_id: int = Field(ge=1, le=MAX_STORED_INTEGER)
    qty: int = Field(ge=1, le=MAX_STORED_INTEGER)
    unit_price: Decimal = Field(ge=Decimal(0), max_digits=18, decimal_places=2)


class SpeedyOrderPayload(SupplierBaseModel):
    customer_id: int = Field(ge=1, le=MAX_STORED_INTEGER)
    order_timestamp: datetime | None = None
    bill_to: SpeedyAddress
    ship_to: SpeedyAddress | None = None
    line_items: list[SpeedyLineItem] = Field(min_length=1)
    priority: Priority = "standard"

    @field_validator("priority", mode="before")
    @classmethod
    def _normalize_priority(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value


SpeedyPayloadInput = SpeedyOrderPayload | Mapping[str, object]
