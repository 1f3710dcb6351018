from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from orderbridge.adapters.sqlalchemy import (
    create_all_tables,
    enable_sqlite_foreign_keys,
    start_mappers,
)
from orderbridge.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork
from orderbridge.domain.model import Customer, Product
from tests.helpers.orders import CUSTOMER_EMAIL, CUSTOMER_ID, GADGET, WIDGET

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Iterator

    from sqlalchemy.ext.asyncio import AsyncEngine

_ENV_VARS = (
    "DATABASE_URI",
    "ORDERBRIDGE_DATA_DIR",
    "ORDERBRIDGE_SQL_ECHO",
    "ORDERBRIDGE_CATALOG_API_URL",
    "ORDERBRIDGE_CATALOG_RATE_LIMIT",
    "ORDERBRIDGE_RESOLVER_CONCURRENCY",
    "ORDERBRIDGE_DEFAULT_PAGE_SIZE",
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
async def sqlite_engine() -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    start_mappers()
    enable_sqlite_foreign_keys(engine)
    await create_all_tables(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(sqlite_engine, expire_on_commit=False)


@pytest.fixture
def sqlite_unit_of_work(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[], SqlAlchemyUnitOfWork]:
    def factory() -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(session_factory)

    return factory


@dataclass(frozen=True)
class SeededCatalog:
    customer_id: int
    customer_email: str
    product_ids: tuple[int, ...]


@pytest.fixture
async def seeded_catalog(session_factory: async_sessionmaker[AsyncSession]) -> SeededCatalog:
    """One customer and the Widget (10) and Gadget (11) products."""

    async with session_factory() as session, session.begin():
        session.add(Customer(id=CUSTOMER_ID, name="Buyer", email=CUSTOMER_EMAIL))
        session.add_all(
            [Product(id=p.id, code=p.code, name=p.name) for p in (WIDGET, GADGET)]
        )
    return SeededCatalog(
        customer_id=CUSTOMER_ID,
        customer_email=CUSTOMER_EMAIL,
        product_ids=(WIDGET.id, GADGET.id),
    )
