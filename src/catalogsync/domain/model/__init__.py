"""Domain model for catalog identity resolution and synchronisation."""

from __future__ import annotations

from .attributes import AttributeDefinition, AttributeSet
from .base import Entity, StoreScopedEntity, new_id, utcnow
from .catalog import Category, Product
from .enums import (
    FailureKind,
    ImportEntity,
    ImportMethod,
    IntegrationSource,
    MappingKind,
    ProductStatus,
)
from .external import ExternalCategory, ExternalCategoryRef, ExternalImage, ExternalProduct
from .mapping import AutoMapping, CategoryMapping, ManualMapping, MappingType
from .statistics import ImportAuditRecord, ImportFailure, ImportRunStatistics

__all__ = [
    "AttributeDefinition",
    "AttributeSet",
    "AutoMapping",
    "Category",
    "CategoryMapping",
    "Entity",
    "ExternalCategory",
    "ExternalCategoryRef",
    "ExternalImage",
    "ExternalProduct",
    "FailureKind",
    "ImportAuditRecord",
    "ImportEntity",
    "ImportFailure",
    "ImportMethod",
    "ImportRunStatistics",
    "IntegrationSource",
    "ManualMapping",
    "MappingKind",
    "MappingType",
    "Product",
    "ProductStatus",
    "StoreScopedEntity",
    "new_id",
    "utcnow",
]
