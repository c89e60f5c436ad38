"""Platform-neutral records produced by the external client adapters."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal  # noqa: TC003

from catalogsync.domain.model.enums import ProductStatus


@dataclass(frozen=True, slots=True)
class ExternalImage:
    url: str
    alt: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ExternalCategory:
    """Category as delivered by an external platform.

    ``parent_code`` is ``None`` for the platform's root level; any other value is the
    ``code`` of another external category, which may or may not be part of the batch.
    """

    external_id: str
    code: str
    name: str
    parent_code: str | None = None
    slug: str | None = None
    description: str | None = None
    sort_order: int = 0
    is_active: bool = True
    image: ExternalImage | None = None

    @property
    def is_root(self) -> bool:
        return self.parent_code is None

    @property
    def match_slug(self) -> str:
        return self.slug or self.code


@dataclass(frozen=True, slots=True, kw_only=True)
class ExternalCategoryRef:
    """Category reference embedded in an external product."""

    code: str
    external_id: str
    name: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ExternalProduct:
    external_id: str
    name: str
    slug: str | None = None
    sku: str | None = None
    status: ProductStatus = ProductStatus.DRAFT
    price: Decimal | None = None
    description: str | None = None
    family: str | None = None
    categories: tuple[ExternalCategoryRef, ...] = ()
    raw_attributes: Mapping[str, str] = field(default_factory=dict[str, str])
    images: tuple[ExternalImage, ...] = ()

    @property
    def category_codes(self) -> list[str]:
        return [ref.code for ref in self.categories]

    @property
    def primary_image(self) -> ExternalImage | None:
        return self.images[0] if self.images else None
