"""Vault supplier adapter: email customers, UUID product codes, epoch timestamps."""

from __future__ import annotations

from .schema import (
    VaultDeliveryDetails,
    VaultItem,
    VaultLocation,
    VaultOrderPayload,
    VaultPayloadInput,
)
from .translator import VaultOrderAdapter, vault_adapter_factory

__all__ = [
    "VaultDeliveryDetails",
    "VaultItem",
    "VaultLocation",
    "VaultOrderAdapter",
    "VaultOrderPayload",
    "VaultPayloadInput",
    "vault_adapter_factory",
]
