"""SQLAlchemy mapping metadata for the catalog domain model."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from decimal import Decimal
from enum import StrEnum
from functools import cache
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from catalogsync.domain.model import (
    AttributeDefinition,
    AttributeSet,
    Category,
    CategoryMapping,
    ImportAuditRecord,
    ImportEntity,
    ImportMethod,
    IntegrationSource,
    MappingKind,
    Product,
    ProductStatus,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]
ENUM_LENGTH = 32


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class UUIDListType(TypeDecorator[list[uuid.UUID]]):
    """Ordered list of UUIDs stored as a JSON array of strings."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: list[uuid.UUID] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps([str(item) for item in value])

    def process_result_value(self, value: str | None, dialect: Dialect) -> list[uuid.UUID]:
        _ = dialect
        if value is None:
            return []
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return []
        items = cast(list[Any], loaded)
        return [uuid.UUID(item) for item in items if isinstance(item, str)]


class DecimalText(TypeDecorator[Decimal]):
    """Exact decimal stored as text; sqlite has no native decimal type."""

    impl = String(ENUM_LENGTH)
    cache_ok = True

    def process_bind_param(self, value: Decimal | None, dialect: Dialect) -> str | None:
        _ = dialect
        return None if value is None else str(value)

    def process_result_value(self, value: str | None, dialect: Dialect) -> Decimal | None:
        _ = dialect
        return None if value is None else Decimal(value)


def _enum_column_type(enum_cls: type[StrEnum]) -> Enum:
    return Enum(
        enum_cls,
        native_enum=False,
        length=ENUM_LENGTH,
        values_callable=lambda members: [member.value for member in members],
    )


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def _timestamps() -> tuple[Column[Any], Column[Any]]:
    return (
        Column("created_at", UTCDateTime, nullable=False),
        Column("updated_at", UTCDateTime, nullable=True),
    )


# Catalog ---------------------------------------------------------------------

category_table = Table(
    "category",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("store_id", UUIDColumnType, nullable=False, index=True),
    Column("name", String, nullable=False),
    Column("slug", String, nullable=False),
    Column("description", Text, nullable=True),
    Column(
        "parent_id",
        UUIDColumnType,
        ForeignKey("category.id", ondelete="SET NULL"),
        nullable=True,
    ),
    Column("level", Integer, nullable=False),
    Column("is_active", Boolean, nullable=False),
    Column("hide_in_menu", Boolean, nullable=False),
    Column("sort_order", Integer, nullable=False),
    Column("external_id", String, nullable=True),
    Column("external_source", _enum_column_type(IntegrationSource), nullable=True),
    Column("media_asset_id", String, nullable=True),
    Column("image_url", String, nullable=True),
    *_timestamps(),
    UniqueConstraint("store_id", "slug", name="uq_category_store_slug"),
    Index("ix_category_store_external", "store_id", "external_source", "external_id"),
)

product_table = Table(
    "product",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("store_id", UUIDColumnType, nullable=False, index=True),
    Column("name", String, nullable=False),
    Column("slug", String, nullable=False),
    Column("sku", String, nullable=True),
    Column("status", _enum_column_type(ProductStatus), nullable=False),
    Column("price", DecimalText, nullable=True),
    Column("description", Text, nullable=True),
    Column("external_id", String, nullable=True),
    Column("external_source", _enum_column_type(IntegrationSource), nullable=True),
    Column("category_ids", UUIDListType, nullable=False),
    Column("attributes", JSON, nullable=False),
    Column("media_asset_id", String, nullable=True),
    Column("image_url", String, nullable=True),
    *_timestamps(),
    UniqueConstraint(
        "store_id", "external_source", "external_id", name="uq_product_store_source_external"
    ),
    Index("ix_product_store_slug", "store_id", "slug"),
)

# Mappings --------------------------------------------------------------------

category_mapping_table = Table(
    "integration_category_mapping",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("store_id", UUIDColumnType, nullable=False, index=True),
    Column("integration_source", _enum_column_type(IntegrationSource), nullable=False),
    Column("external_category_id", String, nullable=True),
    Column("external_category_code", String, nullable=False),
    Column("external_category_name", String, nullable=True),
    Column("external_parent_code", String, nullable=True),
    Column(
        "internal_category_id",
        UUIDColumnType,
        ForeignKey("category.id", ondelete="SET NULL"),
        nullable=True,
    ),
    Column(
        "mapping_type",
        _enum_column_type(MappingKind),
        key="_mapping_kind",
        nullable=False,
        default=MappingKind.MANUAL,
    ),
    Column("confidence_score", Float, key="_confidence_score", nullable=True),
    Column("is_active", Boolean, nullable=False),
    Column("auto_created", Boolean, nullable=False),
    *_timestamps(),
    UniqueConstraint(
        "store_id",
        "integration_source",
        "external_category_code",
        name="uq_category_mapping_store_source_code",
    ),
    Index(
        "ix_category_mapping_store_source_external_id",
        "store_id",
        "integration_source",
        "external_category_id",
    ),
)

# Attributes ------------------------------------------------------------------

attribute_definition_table = Table(
    "attribute_definition",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("store_id", UUIDColumnType, nullable=False, index=True),
    Column("code", String, nullable=False),
    Column("name", String, nullable=False),
    *_timestamps(),
    UniqueConstraint("store_id", "code", name="uq_attribute_definition_store_code"),
)

attribute_set_table = Table(
    "attribute_set",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("store_id", UUIDColumnType, nullable=False, index=True),
    Column("integration_source", _enum_column_type(IntegrationSource), nullable=False),
    Column("name", String, nullable=False),
    Column("attribute_ids", UUIDListType, nullable=False),
    *_timestamps(),
    UniqueConstraint("store_id", "integration_source", name="uq_attribute_set_store_source"),
)

# Audit -----------------------------------------------------------------------

import_statistics_table = Table(
    "import_statistics",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("store_id", UUIDColumnType, nullable=False, index=True),
    Column("entity_type", _enum_column_type(ImportEntity), nullable=False),
    Column("source", _enum_column_type(IntegrationSource), nullable=False),
    Column("method", _enum_column_type(ImportMethod), nullable=False),
    Column("total", Integer, nullable=False),
    Column("imported", Integer, nullable=False),
    Column("skipped", Integer, nullable=False),
    Column("failed", Integer, nullable=False),
    Column("error_details", JSON, nullable=False),
    Column("processing_seconds", Float, nullable=True),
    Column("imported_at", UTCDateTime, nullable=False),
    *_timestamps(),
)


@cache
def start_mappers() -> None:
    """Map domain dataclasses onto the tables above (idempotent)."""

    mapper_registry.map_imperatively(Category, category_table)
    mapper_registry.map_imperatively(Product, product_table)
    mapper_registry.map_imperatively(CategoryMapping, category_mapping_table)
    mapper_registry.map_imperatively(AttributeDefinition, attribute_definition_table)
    mapper_registry.map_imperatively(AttributeSet, attribute_set_table)
    mapper_registry.map_imperatively(ImportAuditRecord, import_statistics_table)
    configure_mappers()
    log.debug("SQLAlchemy mappers configured")


def create_all_tables(engine: Engine) -> None:
    mapper_registry.metadata.create_all(engine)
