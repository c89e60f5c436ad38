"""SQLAlchemy-backed units of work and the per-store connection provider."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from catalogsync.adapters.sqlalchemy.mappings import start_mappers
from catalogsync.adapters.sqlalchemy.migrations import upgrade_head
from catalogsync.adapters.sqlalchemy.repositories import (
    SqlAlchemyCategoryMappingRepository,
    SqlAlchemyCategoryRepository,
    SqlAlchemyProductRepository,
)
from catalogsync.config import get_database_config
from catalogsync.domain.ports.unit_of_work import CatalogRepositories, RepositoryCollection

if TYPE_CHECKING:
    import uuid
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used outside its context."""


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Generic SQLAlchemy unit of work with pluggable repository collections."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory
        self._session: Session | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self.session = None
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyCatalogUnitOfWork(BaseSqlAlchemyUnitOfWork[CatalogRepositories]):
    """Unit of work whose repositories only see one store's rows."""

    def __init__(self, session_factory: sessionmaker[Session], store_id: uuid.UUID) -> None:
        super().__init__(session_factory)
        self.store_id = store_id

    def _build_repositories(self, session: Session) -> CatalogRepositories:
        return CatalogRepositories(
            categories=SqlAlchemyCategoryRepository(session, self.store_id),
            products=SqlAlchemyProductRepository(session, self.store_id),
            category_mappings=SqlAlchemyCategoryMappingRepository(session, self.store_id),
        )


@dataclass(slots=True)
class SqlAlchemyStoreConnections:
    """Shares one engine and connection pool across every store."""

    engine: Engine
    _session_factory: sessionmaker[Session] | None = field(default=None, init=False)

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        return self._session_factory

    def unit_of_work(self, store_id: uuid.UUID) -> SqlAlchemyCatalogUnitOfWork:
        return SqlAlchemyCatalogUnitOfWork(self.session_factory, store_id)

    def dispose(self) -> None:
        """Dispose the engine's pool (primarily for tests and shutdown)."""

        self.engine.dispose()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    migrate: bool = True,
) -> SqlAlchemyStoreConnections:
    """Initialise the engine, mappers and schema; return the connection provider."""

    resolved_engine = engine or create_engine(
        database_uri or get_database_config().uri, future=True
    )
    start_mappers()
    if migrate:
        upgrade_head(engine=resolved_engine)
    log.debug("SQLAlchemy adapter started on %s", resolved_engine.url.render_as_string())
    return SqlAlchemyStoreConnections(resolved_engine)


if TYPE_CHECKING:
    from catalogsync.domain.ports.unit_of_work import CatalogUnitOfWork, StoreConnectionProvider

    _uow_check: CatalogUnitOfWork = SqlAlchemyCatalogUnitOfWork(
        sessionmaker(), store_id=uuid.uuid4()
    )
    _connections_check: StoreConnectionProvider = SqlAlchemyStoreConnections(create_engine(""))
