"""Speedy supplier adapter: numeric customer and product ids, sibling addresses."""

from __future__ import annotations

from .schema import SpeedyAddress, SpeedyLineItem, SpeedyOrderPayload, SpeedyPayloadInput
from .translator import SpeedyOrderAdapter, speedy_adapter_factory

__all__ = [
    "SpeedyAddress",
    "SpeedyLineItem",
    "SpeedyOrderAdapter",
    "SpeedyOrderPayload",
    "SpeedyPayloadInput",
    "speedy_adapter_factory",
]
