"""SQLAlchemy-backed async units of work for the order pipeline."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from orderbridge.adapters.sqlalchemy.mappings import enable_sqlite_foreign_keys, start_mappers
from orderbridge.adapters.sqlalchemy.migrations import upgrade_head
from orderbridge.adapters.sqlalchemy.repositories import (
    SqlAlchemyCustomerRepository,
    SqlAlchemyOrderRepository,
    SqlAlchemyProductRepository,
    SqlAlchemySupplierRepository,
)
from orderbridge.config.storage import get_database_config
from orderbridge.domain.errors import PersistenceFailure
from orderbridge.domain.ports.unit_of_work import OrderRepositories, RepositoryCollection

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.ext.asyncio import AsyncEngine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: AsyncEngine | None = None
    _session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine | None:
        return self._engine

    @engine.setter
    def engine(self, value: AsyncEngine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call orderbridge.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


async def startup(
    *,
    engine: AsyncEngine | None = None,
    database_uri: str | None = None,
    force: bool = False,
    migrate: bool = True,
) -> None:
    """Initialise the engine, mappers and schema, then the session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    if engine is None:
        database = get_database_config()
        engine = create_async_engine(database_uri or database.uri, echo=database.echo)
    enable_sqlite_foreign_keys(engine)
    start_mappers()
    if migrate:
        await upgrade_head(engine=engine)

    _STATE.engine = engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


async def shutdown() -> None:
    """Dispose the managed engine and reset state."""

    if _STATE.engine is not None:
        await _STATE.engine.dispose()
    _STATE.engine = None


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Generic async SQLAlchemy unit of work with pluggable repository collections.

    Leaving the block without ``commit`` discards pending writes; an exception
    inside the block rolls back before the session is closed.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self.session_factory = session_factory or _STATE.session_factory
        self._session: AsyncSession | None = None
        self._repositories: TRepositories | None = None

    @abstractmethod
    def _build_repositories(self, session: AsyncSession) -> TRepositories: ...

    async def __aenter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        try:
            if exc_type is not None:
                await self.rollback()
        finally:
            await self.session.close()
            self.session = None
            self._repositories = None
        return False

    async def commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as exc:
            log.exception("Commit failed, rolling back")
            await self.session.rollback()
            raise PersistenceFailure("The transaction could not be committed") from exc

    async def rollback(self) -> None:
        await self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: AsyncSession | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyUnitOfWork(BaseSqlAlchemyUnitOfWork[OrderRepositories]):
    """Unit of work over orders and the reference data they point at."""

    def _build_repositories(self, session: AsyncSession) -> OrderRepositories:
        return OrderRepositories(
            orders=SqlAlchemyOrderRepository(session),
            customers=SqlAlchemyCustomerRepository(session),
            suppliers=SqlAlchemySupplierRepository(session),
            products=SqlAlchemyProductRepository(session),
        )


if TYPE_CHECKING:
    from orderbridge.domain.ports.unit_of_work import OrderUnitOfWork

    _uow_check: OrderUnitOfWork = SqlAlchemyUnitOfWork()
