"""Import orchestrator: one store, one source, one entity type per run."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

from catalogsync.domain.catalog_import.context import ImportContext
from catalogsync.domain.catalog_import.phases import (
    FetchCategoriesPhase,
    FetchProductsPhase,
    LookupCategoriesPhase,
    PreviewCategoriesPhase,
    PreviewProductsPhase,
    SequenceCategoriesPhase,
    SyncMappingsPhase,
    UpsertCategoriesPhase,
    UpsertProductsPhase,
)
from catalogsync.domain.catalog_import.pipeline import ImportPipeline
from catalogsync.domain.catalog_import.progress import ProgressReporter
from catalogsync.domain.catalog_import.settings import ImportSettings
from catalogsync.domain.errors import CatalogSyncError
from catalogsync.domain.mapping.resolver import CategoryMappingResolver
from catalogsync.domain.model import ImportEntity, ImportMethod
from catalogsync.domain.model.base import utcnow
from catalogsync.domain.upsert import CatalogUpsertEngine

if TYPE_CHECKING:
    from uuid import UUID

    from catalogsync.domain.catalog_import.filters import ImportFilters
    from catalogsync.domain.catalog_import.progress import ProgressCallback
    from catalogsync.domain.catalog_import.registry import IntegrationRegistry
    from catalogsync.domain.model import ImportFailure, ImportRunStatistics, IntegrationSource
    from catalogsync.domain.ports.fetching import CatalogFetcher
    from catalogsync.domain.ports.unit_of_work import CatalogUnitOfWork, StoreConnectionProvider

log = getLogger(__name__)


@dataclass(slots=True, kw_only=True)
class ImportRunResult:
    """Outcome of one run.

    ``success`` means the run completed; check ``stats.failed`` and ``errors`` for
    items that did not make it.
    """

    success: bool
    stats: ImportRunStatistics
    dry_run: bool = False
    preview: list[dict[str, Any]] = field(default_factory=list[dict[str, Any]])
    message: str | None = None

    @property
    def errors(self) -> list[ImportFailure]:
        return self.stats.errors


@dataclass(slots=True, kw_only=True)
class FullImportResult:
    """Categories then products; ``products`` is ``None`` when the category run failed."""

    categories: ImportRunResult
    products: ImportRunResult | None = None

    @property
    def success(self) -> bool:
        return self.categories.success and self.products is not None and self.products.success

    @property
    def imported(self) -> int:
        products = self.products.stats.imported if self.products is not None else 0
        return self.categories.stats.imported + products

    @property
    def message(self) -> str | None:
        if not self.categories.success:
            return f"Category import failed: {self.categories.message}"
        if self.products is not None and not self.products.success:
            return f"Product import failed: {self.products.message}"
        return None


@dataclass(slots=True)
class ImportOrchestrator:
    """Drive fetch, map, sequence, upsert and statistics for one store.

    Items are processed sequentially. Each one commits on its own, so an interrupted
    run can simply be started again.
    """

    store_id: UUID
    source: IntegrationSource
    connections: StoreConnectionProvider
    registry: IntegrationRegistry
    settings: ImportSettings = field(default_factory=ImportSettings)

    def import_categories(
        self,
        *,
        dry_run: bool = False,
        progress: ProgressCallback | None = None,
        method: ImportMethod = ImportMethod.MANUAL,
        filters: ImportFilters | None = None,
    ) -> ImportRunResult:
        return self._run(
            ImportEntity.CATEGORIES,
            dry_run=dry_run,
            progress=progress,
            method=method,
            limit=None,
            filters=filters,
        )

    def import_products(
        self,
        *,
        dry_run: bool = False,
        progress: ProgressCallback | None = None,
        limit: int | None = None,
        method: ImportMethod = ImportMethod.MANUAL,
        filters: ImportFilters | None = None,
    ) -> ImportRunResult:
        return self._run(
            ImportEntity.PRODUCTS,
            dry_run=dry_run,
            progress=progress,
            method=method,
            limit=limit,
            filters=filters,
        )

    def import_all(
        self,
        *,
        dry_run: bool = False,
        progress: ProgressCallback | None = None,
        limit: int | None = None,
        method: ImportMethod = ImportMethod.MANUAL,
        filters: ImportFilters | None = None,
    ) -> FullImportResult:
        """Import categories, then products; products are skipped if categories fail."""

        categories = self.import_categories(
            dry_run=dry_run, progress=progress, method=method, filters=filters
        )
        if not categories.success:
            log.warning(
                "Skipping product import from %s for store %s: category import failed",
                self.source,
                self.store_id,
            )
            return FullImportResult(categories=categories)
        products = self.import_products(
            dry_run=dry_run, progress=progress, limit=limit, method=method, filters=filters
        )
        return FullImportResult(categories=categories, products=products)

    def _run(
        self,
        entity: ImportEntity,
        *,
        dry_run: bool,
        progress: ProgressCallback | None,
        method: ImportMethod,
        limit: int | None,
        filters: ImportFilters | None,
    ) -> ImportRunResult:
        started = time.perf_counter()
        context = ImportContext(
            store_id=self.store_id,
            source=self.source,
            entity=entity,
            dry_run=dry_run,
            progress=ProgressReporter(progress),
        )
        log.info(
            "Starting %s import from %s for store %s (dry_run=%s)",
            entity,
            self.source,
            self.store_id,
            dry_run,
        )

        try:
            fetcher = self.registry.fetcher_for(self.source)
            with self.connections.unit_of_work(self.store_id) as uow:
                pipeline = self._build_pipeline(
                    entity, fetcher, uow, dry_run=dry_run, limit=limit, filters=filters
                )
                pipeline.run(context)
        except CatalogSyncError as exc:
            log.error(
                "%s import from %s for store %s failed: %s",
                entity,
                self.source,
                self.store_id,
                exc,
            )
            return ImportRunResult(
                success=False,
                stats=context.stats,
                dry_run=dry_run,
                message=str(exc),
            )

        elapsed = time.perf_counter() - started
        if not dry_run:
            self._assign_attribute_set(context)
            self._record_statistics(context, method=method, elapsed=elapsed)

        stats = context.stats
        log.info(
            "Finished %s import from %s for store %s: total=%s, imported=%s, skipped=%s, "
            "failed=%s in %.1fs",
            entity,
            self.source,
            self.store_id,
            stats.total,
            stats.imported,
            stats.skipped,
            stats.failed,
            elapsed,
        )
        return ImportRunResult(
            success=True,
            stats=stats,
            dry_run=dry_run,
            preview=context.preview,
        )

    def _build_pipeline(
        self,
        entity: ImportEntity,
        fetcher: CatalogFetcher,
        uow: CatalogUnitOfWork,
        *,
        dry_run: bool,
        limit: int | None,
        filters: ImportFilters | None,
    ) -> ImportPipeline:
        resolver = CategoryMappingResolver(
            uow,
            store_id=self.store_id,
            source=self.source,
            hide_auto_created=self.settings.hide_auto_created,
        )
        engine = CatalogUpsertEngine(
            uow,
            store_id=self.store_id,
            source=self.source,
            resolver=resolver,
            settings=self.settings,
            storage=self.registry.storage,
            images=self.registry.images,
            attributes=self.registry.attributes,
        )
        preview_size = self.settings.preview_size

        if entity is ImportEntity.CATEGORIES:
            pipeline = ImportPipeline(phases=(FetchCategoriesPhase(fetcher, filters),))
            if dry_run:
                return pipeline.extend(
                    (
                        SequenceCategoriesPhase(),
                        PreviewCategoriesPhase(engine, resolver, preview_size),
                    )
                )
            return pipeline.extend(
                (
                    SyncMappingsPhase(resolver),
                    SequenceCategoriesPhase(),
                    UpsertCategoriesPhase(engine, uow),
                )
            )

        pipeline = ImportPipeline()
        if self.settings.auto_create_categories and not dry_run:
            pipeline = pipeline.with_phase(LookupCategoriesPhase(fetcher))
        query = filters.product_query(now=utcnow()) if filters is not None else None
        if query is not None and query.is_empty:
            query = None
        pipeline = pipeline.with_phase(
            FetchProductsPhase(fetcher, limit=limit, query=query, filters=filters)
        )
        if dry_run:
            return pipeline.with_phase(PreviewProductsPhase(engine, resolver, preview_size))
        return pipeline.with_phase(UpsertProductsPhase(engine, uow))

    def _assign_attribute_set(self, context: ImportContext) -> None:
        attribute_sets = self.registry.attribute_sets
        if attribute_sets is None or not context.created_attribute_ids:
            return
        try:
            attribute_sets.assign(self.store_id, self.source, context.created_attribute_ids)
        except Exception as exc:  # noqa: BLE001
            log.warning("Attribute set update for %s failed: %s", self.source, exc)

    def _record_statistics(
        self,
        context: ImportContext,
        *,
        method: ImportMethod,
        elapsed: float,
    ) -> None:
        sink = self.registry.statistics
        if sink is None:
            return
        try:
            sink.record(
                self.store_id,
                context.stats,
                source=self.source,
                method=method,
                processing_seconds=elapsed,
            )
        except Exception as exc:  # noqa: BLE001
            log.warning("Failed to record import statistics: %s", exc)
