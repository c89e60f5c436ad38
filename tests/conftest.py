from __future__ import annotations

import os
import uuid
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002

from catalogsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyStoreConnections, startup

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def connections(sqlite_engine: Engine) -> Iterator[SqlAlchemyStoreConnections]:
    provider = startup(engine=sqlite_engine)
    try:
        yield provider
    finally:
        provider.dispose()


@pytest.fixture
def store_id() -> uuid.UUID:
    return uuid.uuid4()
