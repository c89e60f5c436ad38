"""SQLAlchemy adapter package."""

from __future__ import annotations

from catalogsync.adapters.sqlalchemy.attributes import (
    SqlAlchemyAttributeResolver,
    SqlAlchemyAttributeSetRegistry,
)
from catalogsync.adapters.sqlalchemy.mappings import (
    create_all_tables,
    mapper_registry,
    start_mappers,
)
from catalogsync.adapters.sqlalchemy.repositories import (
    SqlAlchemyCategoryMappingRepository,
    SqlAlchemyCategoryRepository,
    SqlAlchemyProductRepository,
)
from catalogsync.adapters.sqlalchemy.statistics import SqlAlchemyStatisticsSink
from catalogsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    SqlAlchemyStoreConnections,
    StartupError,
    startup,
)

__all__ = [
    "SqlAlchemyAttributeResolver",
    "SqlAlchemyAttributeSetRegistry",
    "SqlAlchemyCatalogUnitOfWork",
    "SqlAlchemyCategoryMappingRepository",
    "SqlAlchemyCategoryRepository",
    "SqlAlchemyProductRepository",
    "SqlAlchemyStatisticsSink",
    "SqlAlchemyStoreConnections",
    "StartupError",
    "create_all_tables",
    "mapper_registry",
    "start_mappers",
    "startup",
]
