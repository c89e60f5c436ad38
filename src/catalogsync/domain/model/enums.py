"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class IntegrationSource(StrEnum):
    """Upstream platforms catalog data is imported from."""

    WOOCOMMERCE = "woocommerce"
    AKENEO = "akeneo"


class ImportEntity(StrEnum):
    CATEGORIES = "categories"
    PRODUCTS = "products"


class ImportMethod(StrEnum):
    MANUAL = "manual"
    SCHEDULED = "scheduled"


class MappingKind(StrEnum):
    AUTO = "auto"
    MANUAL = "manual"


class ProductStatus(StrEnum):
    ACTIVE = "active"
    PENDING = "pending"
    DRAFT = "draft"


class FailureKind(StrEnum):
    """Discriminator for entries in a run's error list."""

    CATEGORY = "category"
    PRODUCT = "product"

    # Side effects: recorded, never counted as failed items
    CATEGORY_IMAGE = "category_image"
    PRODUCT_IMAGE = "product_image"
    PRODUCT_ATTRIBUTES = "product_attributes"

    @property
    def is_side_effect(self) -> bool:
        return self not in {FailureKind.CATEGORY, FailureKind.PRODUCT}
