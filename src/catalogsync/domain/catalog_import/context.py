"""Mutable state threaded through the phases of one import run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from catalogsync.domain.catalog_import.progress import ProgressReporter
from catalogsync.domain.model import ImportRunStatistics

if TYPE_CHECKING:
    from uuid import UUID

    from catalogsync.domain.hierarchy import SequencedCategory
    from catalogsync.domain.model import (
        ExternalCategory,
        ExternalProduct,
        ImportEntity,
        IntegrationSource,
    )


@dataclass(slots=True, kw_only=True)
class ImportContext:
    store_id: UUID
    source: IntegrationSource
    entity: ImportEntity
    dry_run: bool = False
    progress: ProgressReporter = field(default_factory=ProgressReporter)
    stats: ImportRunStatistics = field(init=False)

    categories: list[ExternalCategory] = field(default_factory=list)
    sequenced: list[SequencedCategory] = field(default_factory=list)
    products: list[ExternalProduct] = field(default_factory=list)
    preview: list[dict[str, Any]] = field(default_factory=list[dict[str, Any]])
    created_attribute_ids: list[UUID] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.stats = ImportRunStatistics(entity_type=self.entity)

    @property
    def category_lookup(self) -> dict[str, ExternalCategory]:
        lookup: dict[str, ExternalCategory] = {}
        for category in self.categories:
            lookup.setdefault(category.code, category)
        return lookup
