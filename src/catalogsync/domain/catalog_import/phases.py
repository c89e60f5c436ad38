"""Concrete phases composed by the import orchestrator."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any

from catalogsync.domain.catalog_import.progress import ImportProgress, ImportStage
from catalogsync.domain.errors import CatalogSyncError
from catalogsync.domain.hierarchy import sequence_categories
from catalogsync.domain.model import FailureKind, ImportFailure

if TYPE_CHECKING:
    from catalogsync.domain.catalog_import.context import ImportContext
    from catalogsync.domain.catalog_import.filters import ImportFilters
    from catalogsync.domain.mapping.resolver import CategoryMappingResolver
    from catalogsync.domain.model import ExternalCategory, ExternalProduct
    from catalogsync.domain.ports.fetching import CatalogFetcher, ProductQuery
    from catalogsync.domain.ports.unit_of_work import CatalogUnitOfWork
    from catalogsync.domain.upsert import CatalogUpsertEngine

log = getLogger(__name__)


# Fetch ------------------------------------------------------------------------


@dataclass(slots=True)
class FetchCategoriesPhase:
    fetcher: CatalogFetcher
    filters: ImportFilters | None = None
    name: str = "fetch_categories"

    def run(self, context: ImportContext) -> None:
        categories = self.fetcher.fetch_categories(on_page=context.progress.on_page)
        log.info("Fetched %s categories from %s", len(categories), context.source)
        if self.filters is not None and self.filters.narrows_categories:
            categories = self.filters.select_categories(categories)
            log.info("%s categories left after filtering", len(categories))
        context.categories = categories
        context.stats.total = len(categories)


@dataclass(slots=True)
class LookupCategoriesPhase:
    """Fetch categories as auto-create input for a product run; failures are tolerated."""

    fetcher: CatalogFetcher
    name: str = "lookup_categories"

    def run(self, context: ImportContext) -> None:
        try:
            context.categories = self.fetcher.fetch_categories()
        except CatalogSyncError as exc:
            log.warning(
                "Category lookup for %s failed, continuing without it: %s", context.source, exc
            )
            context.categories = []


@dataclass(slots=True)
class FetchProductsPhase:
    """Fetch products, pushing ``query`` to the platform and re-checking ``filters``."""

    fetcher: CatalogFetcher
    limit: int | None = None
    query: ProductQuery | None = None
    filters: ImportFilters | None = None
    name: str = "fetch_products"

    def run(self, context: ImportContext) -> None:
        products = self.fetcher.fetch_products(
            on_page=context.progress.on_page, query=self.query
        )
        if self.filters is not None:
            accepted = [product for product in products if self.filters.accepts_product(product)]
            if len(accepted) != len(products):
                log.info(
                    "%s of %s products left after filtering", len(accepted), len(products)
                )
            products = accepted
        if self.limit is not None:
            products = products[: self.limit]
        context.products = products
        context.stats.total = len(products)
        log.info("Fetched %s products from %s", len(products), context.source)


# Map / sequence ---------------------------------------------------------------


@dataclass(slots=True)
class SyncMappingsPhase:
    resolver: CategoryMappingResolver
    name: str = "sync_mappings"

    def run(self, context: ImportContext) -> None:
        result = self.resolver.sync_external_categories(context.categories)
        context.progress.report(
            ImportProgress(
                stage=ImportStage.MAP,
                current=result.created + result.updated,
                total=len(context.categories),
                label="category mappings",
            )
        )


@dataclass(slots=True)
class SequenceCategoriesPhase:
    name: str = "sequence_categories"

    def run(self, context: ImportContext) -> None:
        context.sequenced = sequence_categories(context.categories)
        detached = sum(1 for item in context.sequenced if item.detached)
        if detached:
            log.warning(
                "%s categories from %s have no reachable parent and will be stored at root level",
                detached,
                context.source,
            )


# Upsert -----------------------------------------------------------------------


@dataclass(slots=True)
class UpsertCategoriesPhase:
    engine: CatalogUpsertEngine
    uow: CatalogUnitOfWork
    name: str = "upsert_categories"

    def run(self, context: ImportContext) -> None:
        external_id_by_code = {
            code: category.external_id for code, category in context.category_lookup.items()
        }
        seen: set[str] = set()
        total = len(context.sequenced)
        for position, item in enumerate(context.sequenced, start=1):
            category = item.category
            if category.external_id in seen:
                context.stats.record_skipped()
            else:
                seen.add(category.external_id)
                parent_code = item.parent_code
                parent_external_id = (
                    external_id_by_code.get(parent_code) if parent_code is not None else None
                )
                self._upsert(context, category, parent_external_id)
            context.progress.report(
                ImportProgress(
                    stage=ImportStage.UPSERT,
                    current=position,
                    total=total,
                    label=category.name,
                )
            )

    def _upsert(
        self,
        context: ImportContext,
        category: ExternalCategory,
        parent_external_id: str | None,
    ) -> None:
        try:
            outcome = self.engine.upsert_category(
                category, parent_external_id=parent_external_id
            )
        except Exception as exc:  # noqa: BLE001
            self.uow.rollback()
            log.error(
                "Failed to import category %s (%s): %s", category.external_id, category.name, exc
            )
            context.stats.record_failure(
                ImportFailure(
                    kind=FailureKind.CATEGORY,
                    external_id=category.external_id,
                    name=category.name,
                    message=str(exc),
                )
            )
            return
        context.stats.record_imported()
        for failure in outcome.side_effect_failures:
            context.stats.record_failure(failure)


@dataclass(slots=True)
class UpsertProductsPhase:
    engine: CatalogUpsertEngine
    uow: CatalogUnitOfWork
    name: str = "upsert_products"

    def run(self, context: ImportContext) -> None:
        lookup = context.category_lookup
        seen: set[str] = set()
        total = len(context.products)
        for position, product in enumerate(context.products, start=1):
            if product.external_id in seen:
                context.stats.record_skipped()
            else:
                seen.add(product.external_id)
                self._upsert(context, product, lookup)
            context.progress.report(
                ImportProgress(
                    stage=ImportStage.UPSERT,
                    current=position,
                    total=total,
                    label=product.name,
                )
            )

    def _upsert(
        self,
        context: ImportContext,
        product: ExternalProduct,
        lookup: dict[str, ExternalCategory],
    ) -> None:
        try:
            outcome = self.engine.upsert_product(product, category_lookup=lookup)
        except Exception as exc:  # noqa: BLE001
            self.uow.rollback()
            log.error(
                "Failed to import product %s (%s): %s", product.external_id, product.name, exc
            )
            context.stats.record_failure(
                ImportFailure(
                    kind=FailureKind.PRODUCT,
                    external_id=product.external_id,
                    name=product.name,
                    message=str(exc),
                )
            )
            return
        context.stats.record_imported()
        context.created_attribute_ids.extend(outcome.created_attribute_ids)
        for failure in outcome.side_effect_failures:
            context.stats.record_failure(failure)


# Dry-run preview --------------------------------------------------------------


@dataclass(slots=True)
class PreviewCategoriesPhase:
    """Describe what a real run would do with the first few categories; writes nothing."""

    engine: CatalogUpsertEngine
    resolver: CategoryMappingResolver
    size: int
    name: str = "preview_categories"

    def run(self, context: ImportContext) -> None:
        sample = context.sequenced[: self.size]
        mapped = self.resolver.get_internal_category_ids(item.category.code for item in sample)
        context.preview = [self._describe(item.category, item.detached, mapped) for item in sample]

    def _describe(
        self,
        category: ExternalCategory,
        detached: bool,
        mapped: dict[str, Any],
    ) -> dict[str, Any]:
        entry: dict[str, Any] = {
            "external_id": category.external_id,
            "code": category.code,
            "name": category.name,
            "parent_code": None if detached else category.parent_code,
            "detached": detached,
            "action": "update" if self.engine.find_existing_category(category) else "create",
            "mapped_category_id": None,
            "match_strategy": None,
            "confidence": None,
        }
        mapped_id = mapped.get(category.code)
        if mapped_id is not None:
            entry["mapped_category_id"] = str(mapped_id)
            return entry
        match = self.resolver.find_auto_match(category)
        if match is not None:
            entry["mapped_category_id"] = str(match.category_id)
            entry["match_strategy"] = match.strategy.value
            entry["confidence"] = match.confidence
        return entry


@dataclass(slots=True)
class PreviewProductsPhase:
    engine: CatalogUpsertEngine
    resolver: CategoryMappingResolver
    size: int
    name: str = "preview_products"

    def run(self, context: ImportContext) -> None:
        context.preview = [self._describe(product) for product in context.products[: self.size]]

    def _describe(self, product: ExternalProduct) -> dict[str, Any]:
        mapped = self.resolver.get_internal_category_ids(product.category_codes)
        return {
            "external_id": product.external_id,
            "name": product.name,
            "sku": product.sku,
            "status": product.status.value,
            "category_codes": product.category_codes,
            "mapped_category_ids": [
                str(mapped[code]) for code in product.category_codes if code in mapped
            ],
            "action": "update" if self.engine.find_existing_product(product) else "create",
        }
