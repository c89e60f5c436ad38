"""Internal catalog entities: categories and products."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from catalogsync.domain.model.base import StoreScopedEntity
from catalogsync.domain.model.enums import IntegrationSource, ProductStatus

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


@dataclass(eq=False, kw_only=True)
class Category(StoreScopedEntity):
    """Node of a store's category tree.

    ``level`` is always the depth from the root: ``0`` without a parent and
    ``parent.level + 1`` otherwise. Use :meth:`attach_to` to move a category so
    both values change together.
    """

    name: str
    slug: str
    description: str | None = None
    parent_id: UUID | None = None
    level: int = 0
    is_active: bool = True
    hide_in_menu: bool = False
    sort_order: int = 0
    external_id: str | None = None
    external_source: IntegrationSource | None = None
    media_asset_id: str | None = None
    image_url: str | None = None

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def attach_to(self, parent: Category | None) -> None:
        if parent is None:
            self.parent_id = None
            self.level = 0
            return
        if parent.id == self.id:
            raise ValueError("category cannot be its own parent")
        if parent.store_id != self.store_id:
            raise ValueError("parent category belongs to a different store")
        self.parent_id = parent.id
        self.level = parent.level + 1

    def link_external(self, source: IntegrationSource, external_id: str) -> None:
        self.external_source = source
        self.external_id = external_id


@dataclass(eq=False, kw_only=True)
class Product(StoreScopedEntity):
    name: str
    slug: str
    sku: str | None = None
    status: ProductStatus = ProductStatus.DRAFT
    price: Decimal | None = None
    description: str | None = None
    external_id: str | None = None
    external_source: IntegrationSource | None = None
    category_ids: list[UUID] = field(default_factory=list)
    attributes: dict[str, str] = field(default_factory=dict)
    media_asset_id: str | None = None
    image_url: str | None = None

    def assign_categories(self, category_ids: Iterable[UUID]) -> None:
        """Replace the category set, keeping first-seen order and dropping repeats."""

        self.category_ids = list(dict.fromkeys(category_ids))

    def apply_attributes(self, attributes: Mapping[str, str]) -> None:
        self.attributes = dict(attributes)

    def link_external(self, source: IntegrationSource, external_id: str) -> None:
        self.external_source = source
        self.external_id = external_id
