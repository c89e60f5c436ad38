"""Persisted external-to-internal category mapping resolution."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.domain.errors import UnknownCategoryError
from catalogsync.domain.mapping import matching
from catalogsync.domain.model import Category, CategoryMapping
from catalogsync.domain.slugs import slugify

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID

    from catalogsync.domain.model import ExternalCategory, IntegrationSource
    from catalogsync.domain.ports.persistence import (
        CategoryMappingRepository,
        CategoryRepository,
    )
    from catalogsync.domain.ports.unit_of_work import CatalogUnitOfWork

log = getLogger(__name__)

AUTO_CREATED_CONFIDENCE = 1.0


@dataclass(frozen=True, slots=True)
class SyncResult:
    created: int
    updated: int


@dataclass(frozen=True, slots=True)
class AutoMatchSummary:
    matched: int
    unmatched: int


class CategoryMappingResolver:
    """Resolve external categories of one (store, source) pair to internal categories.

    Every write commits on its own so a failure only loses the row being written.
    ``find_auto_match`` is the only read-only entry point that evaluates the ladder.
    """

    def __init__(
        self,
        uow: CatalogUnitOfWork,
        *,
        store_id: UUID,
        source: IntegrationSource,
        hide_auto_created: bool = True,
    ) -> None:
        self.uow = uow
        self.store_id = store_id
        self.source = source
        self.hide_auto_created = hide_auto_created

    @property
    def _categories(self) -> CategoryRepository:
        return self.uow.repositories.categories

    @property
    def _mappings(self) -> CategoryMappingRepository:
        return self.uow.repositories.category_mappings

    def resolve_category(
        self, external: ExternalCategory, *, describe: bool = True
    ) -> UUID | None:
        mapping = self._mappings.find(
            self.source,
            code=external.code,
            external_id=external.external_id,
            active_only=True,
        )
        if mapping is not None and mapping.internal_category_id is not None:
            return mapping.internal_category_id

        match = self.find_auto_match(external)
        mapping = self._upsert_mapping(external, describe=describe)
        if match is not None:
            mapping.link_auto(match.category_id, match.confidence)
            log.debug(
                "Auto-matched %s category %s via %s (%.2f)",
                self.source,
                external.code,
                match.strategy,
                match.confidence,
            )
        self.uow.commit()
        return match.category_id if match is not None else None

    def find_auto_match(self, external: ExternalCategory) -> matching.AutoMatch | None:
        return matching.find_auto_match(
            code=external.code,
            name=external.name,
            slug=external.slug,
            candidates=self._candidates(),
        )

    def set_mapping(self, code: str, category_id: UUID) -> CategoryMapping:
        if self._categories.get(category_id) is None:
            raise UnknownCategoryError(f"Category {category_id} does not exist in this store")
        mapping = self._mappings.find(self.source, code=code)
        if mapping is None:
            mapping = CategoryMapping(
                store_id=self.store_id,
                integration_source=self.source,
                external_category_code=code,
            )
            self._mappings.add(mapping)
        mapping.link_manual(category_id)
        self.uow.commit()
        return mapping

    def remove_mapping(self, code: str) -> CategoryMapping | None:
        mapping = self._mappings.find(self.source, code=code)
        if mapping is None:
            return None
        mapping.unlink()
        self.uow.commit()
        return mapping

    def sync_external_categories(self, externals: Iterable[ExternalCategory]) -> SyncResult:
        """Refresh structural metadata only; never touches existing links."""

        existing = self._mappings.list_for_source(self.source)
        by_code = {mapping.external_category_code: mapping for mapping in existing}
        by_external_id = {
            mapping.external_category_id: mapping
            for mapping in existing
            if mapping.external_category_id is not None
        }

        created = updated = 0
        for external in externals:
            mapping = by_external_id.get(external.external_id) or by_code.get(external.code)
            if mapping is not None:
                if mapping.describe(
                    name=external.name,
                    parent_code=external.parent_code,
                    external_id=external.external_id,
                ):
                    updated += 1
                continue
            mapping = self._new_mapping(external)
            self._mappings.add(mapping)
            by_code[mapping.external_category_code] = mapping
            by_external_id[external.external_id] = mapping
            created += 1

        self.uow.commit()
        log.info(
            "Synced %s category mappings: created=%s, updated=%s", self.source, created, updated
        )
        return SyncResult(created=created, updated=updated)

    def auto_match_all(self) -> AutoMatchSummary:
        candidates = self._candidates()
        matched = unmatched = 0
        for mapping in self._mappings.list_unmapped(self.source):
            match = matching.find_auto_match(
                code=mapping.external_category_code,
                name=mapping.external_category_name,
                slug=None,
                candidates=candidates,
            )
            if match is None:
                unmatched += 1
                continue
            mapping.link_auto(match.category_id, match.confidence)
            matched += 1
        self.uow.commit()
        return AutoMatchSummary(matched=matched, unmatched=unmatched)

    def get_internal_category_ids(self, codes: Iterable[str]) -> dict[str, UUID]:
        return self._mappings.internal_ids_for_codes(self.source, codes)

    def get_mappings(self) -> list[CategoryMapping]:
        return self._mappings.list_for_source(self.source)

    def get_unmapped(self) -> list[CategoryMapping]:
        return self._mappings.list_unmapped(self.source)

    def auto_create_category(self, external: ExternalCategory, *, describe: bool = True) -> UUID:
        """Create (or reuse by slug) an internal category for ``external`` and link it.

        ``auto_created`` is only set on the mapping when a new category was written.
        With ``describe=False`` an existing mapping keeps its stored name and parent.
        """

        slug = slugify(external.name) or slugify(external.code)
        category = self._categories.get_by_slug(slug)
        created = category is None
        if category is None:
            category = Category(
                store_id=self.store_id,
                name=external.name,
                slug=slug,
                hide_in_menu=self.hide_auto_created,
                description=external.description,
            )
            category.link_external(self.source, external.external_id)
            category.attach_to(self._mapped_parent(external.parent_code))
            self._categories.add(category)
            log.info("Auto-created category %s for %s code %s", slug, self.source, external.code)

        mapping = self._upsert_mapping(external, describe=describe)
        mapping.link_auto(category.id, AUTO_CREATED_CONFIDENCE)
        mapping.auto_created = created
        self.uow.commit()
        return category.id

    def resolve_categories_with_auto_create(
        self,
        externals: Iterable[ExternalCategory],
        *,
        auto_create: bool = True,
        describe: bool = True,
    ) -> list[UUID]:
        resolved: list[UUID] = []
        for external in externals:
            category_id = self.resolve_category(external, describe=describe)
            if category_id is None and auto_create:
                category_id = self.auto_create_category(external, describe=describe)
            if category_id is not None:
                resolved.append(category_id)
        return resolved

    def _candidates(self) -> list[matching.MatchCandidate]:
        return [
            matching.MatchCandidate.from_category(category)
            for category in self._categories.list_active()
        ]

    def _mapped_parent(self, parent_code: str | None) -> Category | None:
        if parent_code is None:
            return None
        parent_id = self.get_internal_category_ids([parent_code]).get(parent_code)
        if parent_id is None:
            return None
        return self._categories.get(parent_id)

    def _new_mapping(self, external: ExternalCategory) -> CategoryMapping:
        return CategoryMapping(
            store_id=self.store_id,
            integration_source=self.source,
            external_category_code=external.code,
            external_category_id=external.external_id,
            external_category_name=external.name,
            external_parent_code=external.parent_code,
        )

    def _upsert_mapping(
        self, external: ExternalCategory, *, describe: bool = True
    ) -> CategoryMapping:
        mapping = self._mappings.find(
            self.source, code=external.code, external_id=external.external_id
        )
        if mapping is None:
            mapping = self._new_mapping(external)
            self._mappings.add(mapping)
            return mapping
        if not describe:
            return mapping
        mapping.describe(
            name=external.name,
            parent_code=external.parent_code,
            external_id=external.external_id,
        )
        return mapping
