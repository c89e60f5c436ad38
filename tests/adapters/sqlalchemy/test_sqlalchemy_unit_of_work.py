from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine, inspect

from catalogsync.adapters.sqlalchemy import (
    SqlAlchemyCatalogUnitOfWork,
    StartupError,
    startup,
)
from catalogsync.domain.model import Category

if TYPE_CHECKING:
    from pathlib import Path

    from sqlalchemy.engine import Engine

    from catalogsync.adapters.sqlalchemy import SqlAlchemyStoreConnections

EXPECTED_TABLES = {
    "alembic_version",
    "attribute_definition",
    "attribute_set",
    "category",
    "import_statistics",
    "integration_category_mapping",
    "product",
}


def test_startup_runs_migrations(
    connections: SqlAlchemyStoreConnections, sqlite_engine: Engine
) -> None:
    assert connections.engine is sqlite_engine
    assert EXPECTED_TABLES <= set(inspect(sqlite_engine).get_table_names())


def test_startup_from_database_uri(tmp_path: Path) -> None:
    database = tmp_path / "catalog.db"

    connections = startup(database_uri=f"sqlite+pysqlite:///{database}")
    try:
        assert database.exists()
        assert EXPECTED_TABLES <= set(inspect(connections.engine).get_table_names())
    finally:
        connections.dispose()


def test_migrations_are_idempotent(tmp_path: Path) -> None:
    engine = create_engine(f"sqlite+pysqlite:///{tmp_path / 'twice.db'}")
    try:
        startup(engine=engine)
        startup(engine=engine)
        assert "category" in inspect(engine).get_table_names()
    finally:
        engine.dispose()


def test_repositories_outside_context_raise(
    connections: SqlAlchemyStoreConnections, store_id: uuid.UUID
) -> None:
    uow = SqlAlchemyCatalogUnitOfWork(connections.session_factory, store_id)

    with pytest.raises(StartupError):
        _ = uow.repositories

    with uow:
        assert uow.store_id == store_id

    with pytest.raises(StartupError):
        _ = uow.session


def test_exception_rolls_back_uncommitted_work(
    connections: SqlAlchemyStoreConnections, store_id: uuid.UUID
) -> None:
    def add_then_fail() -> None:
        with connections.unit_of_work(store_id) as uow:
            uow.repositories.categories.add(Category(store_id=store_id, name="Tmp", slug="tmp"))
            uow.session.flush()
            raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        add_then_fail()

    with connections.unit_of_work(store_id) as uow:
        assert uow.repositories.categories.get_by_slug("tmp") is None


def test_explicit_rollback_discards_pending_rows(
    connections: SqlAlchemyStoreConnections, store_id: uuid.UUID
) -> None:
    with connections.unit_of_work(store_id) as uow:
        uow.repositories.categories.add(Category(store_id=store_id, name="Keep", slug="keep"))
        uow.commit()
        uow.repositories.categories.add(Category(store_id=store_id, name="Drop", slug="drop"))
        uow.rollback()
        assert uow.repositories.categories.get_by_slug("keep") is not None
        assert uow.repositories.categories.get_by_slug("drop") is None
