"""Domain port definitions for adapters."""

from __future__ import annotations

from .ingestion import AdapterFactory, SupplierOrderAdapter
from .persistence import (
    CustomerExistence,
    CustomerRepository,
    OrderRepository,
    ProductExistence,
    ProductLookup,
    ProductRepository,
    SupplierExistence,
    SupplierRepository,
)
from .unit_of_work import (
    OrderRepositories,
    OrderUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "AdapterFactory",
    "CustomerExistence",
    "CustomerRepository",
    "OrderRepositories",
    "OrderRepository",
    "OrderUnitOfWork",
    "ProductExistence",
    "ProductLookup",
    "ProductRepository",
    "RepositoryCollection",
    "SupplierExistence",
    "SupplierOrderAdapter",
    "SupplierRepository",
    "UnitOfWork",
]
