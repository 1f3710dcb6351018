"""SQLAlchemy adapter package for orderbridge."""

from __future__ import annotations

from .mappings import (
    create_all_tables,
    enable_sqlite_foreign_keys,
    mapper_registry,
    seed_suppliers,
    start_mappers,
)
from .repositories import (
    SqlAlchemyCustomerRepository,
    SqlAlchemyOrderRepository,
    SqlAlchemyProductRepository,
    SqlAlchemySupplierRepository,
)
from .unit_of_work import SqlAlchemyUnitOfWork, shutdown, startup

__all__ = [
    "SqlAlchemyCustomerRepository",
    "SqlAlchemyOrderRepository",
    "SqlAlchemyProductRepository",
    "SqlAlchemySupplierRepository",
    "SqlAlchemyUnitOfWork",
    "create_all_tables",
    "enable_sqlite_foreign_keys",
    "mapper_registry",
    "seed_suppliers",
    "shutdown",
    "start_mappers",
    "startup",
]
