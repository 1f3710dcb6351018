"""Pydantic models describing Vault order payloads."""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Annotated
from uuid import UUID  # noqa: TC003

from pydantic import Field, StringConstraints, field_validator

from orderbridge.adapters.payloads import SupplierBaseModel
from orderbridge.domain.validation import MAX_STORED_INTEGER, check_email

# 9999-12-31T23:59:59Z, the last second a datetime can hold
MAX_EPOCH_SECONDS = 253_402_300_799

Street = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]


class VaultLocation(SupplierBaseModel):
    address_line: Street
    city_name: str | None = None
    state_province: str | None = None
    zip_postal: str | None = None
    country_code: str | None = None


class VaultDeliveryDetails(SupplierBaseModel):
    billing_location: VaultLocation
    shipping_location: VaultLocation | None = None


class VaultItem(SupplierBaseModel):
    product_code: UUID
    quantity_ordered: int = Field(ge=1, le=MAX_STORED_INTEGER)
    price_per_unit: Decimal = Field(ge=Decimal(0), max_digits=18, decimal_places=2)


class VaultOrderPayload(SupplierBaseModel):
    customer_email: str
    placed_at: int = Field(ge=0, le=MAX_EPOCH_SECONDS, description="Unix epoch seconds")
    delivery_details: VaultDeliveryDetails
    items: list[VaultItem] = Field(min_length=1)
    fulfillment_instructions: str | None = None

    @field_validator("customer_email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        # Kept as sent; email-validator would normalize the domain.
        problem = check_email(value)
        if problem is not None:
            raise ValueError(problem)
        return value


VaultPayloadInput = VaultOrderPayload | Mapping[str, object]
