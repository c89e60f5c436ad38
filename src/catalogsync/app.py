"""Application wiring: adapters, registry and the entry points the CLI calls."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.adapters.akeneo import AkeneoFetcher
from catalogsync.adapters.media import HttpImageDownloader, LocalFileStorage
from catalogsync.adapters.sqlalchemy import (
    SqlAlchemyAttributeResolver,
    SqlAlchemyAttributeSetRegistry,
    SqlAlchemyStatisticsSink,
    startup,
)
from catalogsync.adapters.woocommerce import WooCommerceFetcher
from catalogsync.config import get_import_settings, get_storage_config
from catalogsync.domain.catalog_import import ImportOrchestrator, IntegrationRegistry
from catalogsync.domain.mapping import CategoryMappingResolver
from catalogsync.domain.model import ImportEntity, ImportMethod, IntegrationSource

if TYPE_CHECKING:
    from uuid import UUID

    from catalogsync.adapters.sqlalchemy import SqlAlchemyStoreConnections
    from catalogsync.config import StorageConfig
    from catalogsync.domain.catalog_import import (
        FetcherFactory,
        FullImportResult,
        ImportFilters,
        ImportRunResult,
        ImportSettings,
        ProgressCallback,
    )
    from catalogsync.domain.mapping import AutoMatchSummary
    from catalogsync.domain.model import CategoryMapping
    from catalogsync.domain.ports import ConnectionCheck

log = getLogger(__name__)

FETCHERS: dict[IntegrationSource, FetcherFactory] = {
    IntegrationSource.WOOCOMMERCE: WooCommerceFetcher,
    IntegrationSource.AKENEO: AkeneoFetcher,
}


def build_registry(
    connections: SqlAlchemyStoreConnections,
    *,
    storage_config: StorageConfig | None = None,
) -> IntegrationRegistry:
    """Registry with both platform fetchers and the SQL-backed collaborators."""

    storage = storage_config or get_storage_config()
    return IntegrationRegistry(
        fetchers=FETCHERS,
        statistics=SqlAlchemyStatisticsSink(connections),
        storage=LocalFileStorage(root=storage.media_path(), base_url=storage.media_base_url),
        images=HttpImageDownloader(),
        attributes=SqlAlchemyAttributeResolver(connections),
        attribute_sets=SqlAlchemyAttributeSetRegistry(connections),
    )


def _orchestrator(
    store_id: UUID,
    source: IntegrationSource,
    connections: SqlAlchemyStoreConnections | None,
    registry: IntegrationRegistry | None,
    settings: ImportSettings | None,
) -> ImportOrchestrator:
    effective_connections = connections or startup()
    return ImportOrchestrator(
        store_id=store_id,
        source=source,
        connections=effective_connections,
        registry=registry or build_registry(effective_connections),
        settings=settings or get_import_settings(),
    )


def run_import(
    entity: ImportEntity,
    *,
    store_id: UUID,
    source: IntegrationSource,
    dry_run: bool = False,
    limit: int | None = None,
    method: ImportMethod = ImportMethod.MANUAL,
    progress: ProgressCallback | None = None,
    connections: SqlAlchemyStoreConnections | None = None,
    registry: IntegrationRegistry | None = None,
    settings: ImportSettings | None = None,
    filters: ImportFilters | None = None,
) -> ImportRunResult:
    """Run one category or product import for a store."""

    orchestrator = _orchestrator(store_id, source, connections, registry, settings)
    if entity is ImportEntity.CATEGORIES:
        return orchestrator.import_categories(
            dry_run=dry_run, progress=progress, method=method, filters=filters
        )
    return orchestrator.import_products(
        dry_run=dry_run, progress=progress, limit=limit, method=method, filters=filters
    )


def run_full_import(
    *,
    store_id: UUID,
    source: IntegrationSource,
    dry_run: bool = False,
    limit: int | None = None,
    method: ImportMethod = ImportMethod.MANUAL,
    progress: ProgressCallback | None = None,
    connections: SqlAlchemyStoreConnections | None = None,
    registry: IntegrationRegistry | None = None,
    settings: ImportSettings | None = None,
    filters: ImportFilters | None = None,
) -> FullImportResult:
    orchestrator = _orchestrator(store_id, source, connections, registry, settings)
    return orchestrator.import_all(
        dry_run=dry_run, progress=progress, limit=limit, method=method, filters=filters
    )


def check_connection(
    source: IntegrationSource, *, registry: IntegrationRegistry | None = None
) -> ConnectionCheck:
    """Authenticate against ``source`` without touching the database."""

    check = (registry or IntegrationRegistry(fetchers=FETCHERS)).check_connection(source)
    log.info("Connection check for %s: %s", source, check.message)
    return check


def auto_match_categories(
    *,
    store_id: UUID,
    source: IntegrationSource,
    connections: SqlAlchemyStoreConnections | None = None,
) -> AutoMatchSummary:
    effective_connections = connections or startup()
    with effective_connections.unit_of_work(store_id) as uow:
        resolver = CategoryMappingResolver(uow, store_id=store_id, source=source)
        summary = resolver.auto_match_all()
    log.info(
        "Auto-matched %s categories for store %s: matched=%s, unmatched=%s",
        source,
        store_id,
        summary.matched,
        summary.unmatched,
    )
    return summary


def map_category(
    *,
    store_id: UUID,
    source: IntegrationSource,
    code: str,
    category_id: UUID,
    connections: SqlAlchemyStoreConnections | None = None,
) -> CategoryMapping:
    effective_connections = connections or startup()
    with effective_connections.unit_of_work(store_id) as uow:
        resolver = CategoryMappingResolver(uow, store_id=store_id, source=source)
        return resolver.set_mapping(code, category_id)


def unmap_category(
    *,
    store_id: UUID,
    source: IntegrationSource,
    code: str,
    connections: SqlAlchemyStoreConnections | None = None,
) -> CategoryMapping | None:
    effective_connections = connections or startup()
    with effective_connections.unit_of_work(store_id) as uow:
        resolver = CategoryMappingResolver(uow, store_id=store_id, source=source)
        return resolver.remove_mapping(code)


def list_category_mappings(
    *,
    store_id: UUID,
    source: IntegrationSource,
    unmapped_only: bool = False,
    connections: SqlAlchemyStoreConnections | None = None,
) -> list[CategoryMapping]:
    effective_connections = connections or startup()
    with effective_connections.unit_of_work(store_id) as uow:
        resolver = CategoryMappingResolver(uow, store_id=store_id, source=source)
        return resolver.get_unmapped() if unmapped_only else resolver.get_mappings()
