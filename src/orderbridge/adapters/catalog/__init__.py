"""Remote product catalog adapter."""

from __future__ import annotations

from .client import HttpProductCatalog
from .schema import CatalogProductPayload

__all__ = ["CatalogProductPayload", "HttpProductCatalog"]
