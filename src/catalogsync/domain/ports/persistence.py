"""Persistence ports for the catalog domain.

Every repository is bound to one store when constructed; none of these methods can
see another tenant's rows.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID

    from catalogsync.domain.model import (
        Category,
        CategoryMapping,
        IntegrationSource,
        Product,
    )


class CategoryRepository(Protocol):
    def add(self, entity: Category) -> None: ...

    def get(self, category_id: UUID) -> Category | None: ...

    def get_by_external_id(self, source: IntegrationSource, external_id: str) -> Category | None:
        ...

    def get_by_slug(self, slug: str) -> Category | None: ...

    def list_active(self) -> list[Category]: ...


class ProductRepository(Protocol):
    def add(self, entity: Product) -> None: ...

    def get_by_external_id(self, source: IntegrationSource, external_id: str) -> Product | None:
        ...

    def get_by_slug(self, slug: str) -> Product | None: ...


class CategoryMappingRepository(Protocol):
    def add(self, entity: CategoryMapping) -> None: ...

    def find(
        self,
        source: IntegrationSource,
        *,
        code: str,
        external_id: str | None = None,
        active_only: bool = False,
    ) -> CategoryMapping | None:
        """Return the mapping matching ``external_id`` or ``code``."""
        ...

    def list_for_source(self, source: IntegrationSource) -> list[CategoryMapping]: ...

    def list_unmapped(self, source: IntegrationSource) -> list[CategoryMapping]: ...

    def internal_ids_for_codes(
        self, source: IntegrationSource, codes: Iterable[str]
    ) -> dict[str, UUID]:
        """Return active, linked mappings for ``codes`` in a single query."""
        ...
