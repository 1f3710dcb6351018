"""SQLAlchemy mapping metadata for the orderbridge domain model."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Any, Final, cast

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Table,
    TypeDecorator,
    Uuid,
    event,
    insert,
    orm,
    select,
)
from sqlalchemy.orm import configure_mappers, relationship

from orderbridge.domain.model import (
    KNOWN_SUPPLIERS,
    Address,
    Customer,
    Order,
    OrderItem,
    OrderStatus,
    Product,
    Supplier,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection
    from sqlalchemy.ext.asyncio import AsyncEngine
    from sqlalchemy.pool import ConnectionPoolEntry

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]
MONEY_PRECISION: Final = 18
MONEY_SCALE: Final = 2


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


_ADDRESS_KEYS: Final = {
    "street": "street",
    "city": "city",
    "county": "county",
    "postal_code": "postalCode",
    "country": "country",
}


class AddressType(TypeDecorator[Address]):
    """Stores an ``Address`` value object as a JSON document."""

    impl = String
    cache_ok = True

    def process_bind_param(self, value: Address | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        payload = {key: getattr(value, attr) for attr, key in _ADDRESS_KEYS.items()}
        return json.dumps(payload, sort_keys=True)

    def process_result_value(self, value: str | None, dialect: Dialect) -> Address | None:
        _ = dialect
        if value is None:
            return None
        loaded = json.loads(value)
        if not isinstance(loaded, dict):
            raise ValueError(f"Stored address is not a JSON object: {value!r}")
        data = cast(dict[str, Any], loaded)
        return Address(**{attr: data.get(key) for attr, key in _ADDRESS_KEYS.items()})


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Reference tables --------------------------------------------------------------

customer_table = Table(
    "customer",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(200), nullable=False),
    Column("email", String(200), nullable=True, unique=True),
)

supplier_table = Table(
    "supplier",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("name", String(100), nullable=False),
)

product_table = Table(
    "product",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("code", UUIDColumnType, nullable=False, unique=True),
    Column("name", String(200), nullable=False),
)

# Order aggregate -----------------------------------------------------------------

purchase_order_table = Table(
    "purchase_order",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "customer_id",
        Integer,
        ForeignKey("customer.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    ),
    Column("customer_email", String(200), nullable=True),
    Column(
        "supplier_id",
        Integer,
        ForeignKey("supplier.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    ),
    Column("order_date", UTCDateTime(), nullable=False),
    Column(
        "status",
        Enum(
            OrderStatus,
            native_enum=False,
            length=20,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=OrderStatus.RECEIVED,
    ),
    Column("billing_address", AddressType(), nullable=False),
    Column("delivery_address", AddressType(), nullable=True),
    CheckConstraint(
        "customer_id IS NOT NULL OR customer_email IS NOT NULL", name="customer_identified"
    ),
    Index("ix_purchase_order_order_date_id", "order_date", "id"),
)

order_item_table = Table(
    "order_item",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "order_id",
        Integer,
        ForeignKey("purchase_order.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    ),
    Column(
        "product_id",
        Integer,
        ForeignKey("product.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    ),
    Column("quantity", Integer, nullable=False),
    Column("price", Numeric(MONEY_PRECISION, MONEY_SCALE), nullable=False),
    CheckConstraint("quantity > 0", name="quantity_positive"),
    CheckConstraint("price >= 0", name="price_not_negative"),
)


@cache
def start_mappers() -> orm.registry:
    """Map the domain dataclasses onto their tables (idempotent)."""

    mapper_registry.map_imperatively(Customer, customer_table)
    mapper_registry.map_imperatively(Supplier, supplier_table)
    mapper_registry.map_imperatively(Product, product_table)

    mapper_registry.map_imperatively(
        OrderItem,
        order_item_table,
        properties={
            "product": relationship(Product, lazy="raise", viewonly=True),
        },
    )

    mapper_registry.map_imperatively(
        Order,
        purchase_order_table,
        properties={
            # items are deleted by the ORM; the database refuses orphaning deletes
            "items": relationship(
                OrderItem,
                order_by=order_item_table.c.id,
                cascade="all, delete-orphan",
                lazy="raise",
            ),
            "supplier": relationship(Supplier, lazy="raise", viewonly=True),
        },
    )

    configure_mappers()
    return mapper_registry


def _enable_foreign_keys(dbapi_connection: Any, connection_record: ConnectionPoolEntry) -> None:
    _ = connection_record
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite ignores foreign keys unless every connection opts in."""

    if engine.dialect.name != "sqlite":
        return
    if not event.contains(engine.sync_engine, "connect", _enable_foreign_keys):
        event.listen(engine.sync_engine, "connect", _enable_foreign_keys)


def seed_suppliers(connection: Connection) -> None:
    """Insert the known suppliers that are not present yet."""

    existing = set(connection.execute(select(supplier_table.c.id)).scalars())
    rows = [
        {"id": ref.id, "name": ref.name}
        for ref in KNOWN_SUPPLIERS.values()
        if ref.id not in existing
    ]
    if rows:
        connection.execute(insert(supplier_table), rows)


def _create_all(connection: Connection) -> None:
    mapper_registry.metadata.create_all(connection)
    seed_suppliers(connection)


async def create_all_tables(engine: AsyncEngine) -> None:
    """Create database tables for the mapped metadata and seed the suppliers."""

    log.info("Creating all tables")
    async with engine.begin() as connection:
        await connection.run_sync(_create_all)
