"""Initial catalog schema.

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

ENUM_LENGTH = 32


def _timestamps() -> list[sa.Column[object]]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "category",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("store_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("parent_id", sa.Uuid(), nullable=True),
        sa.Column("level", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("hide_in_menu", sa.Boolean(), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("external_id", sa.String(), nullable=True),
        sa.Column("external_source", sa.String(ENUM_LENGTH), nullable=True),
        sa.Column("media_asset_id", sa.String(), nullable=True),
        sa.Column("image_url", sa.String(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["parent_id"],
            ["category.id"],
            name="fk_category_parent_id_category",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_category"),
        sa.UniqueConstraint("store_id", "slug", name="uq_category_store_slug"),
    )
    op.create_index("ix_category_store_id", "category", ["store_id"])
    op.create_index(
        "ix_category_store_external",
        "category",
        ["store_id", "external_source", "external_id"],
    )

    op.create_table(
        "product",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("store_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("sku", sa.String(), nullable=True),
        sa.Column("status", sa.String(ENUM_LENGTH), nullable=False),
        sa.Column("price", sa.String(ENUM_LENGTH), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("external_id", sa.String(), nullable=True),
        sa.Column("external_source", sa.String(ENUM_LENGTH), nullable=True),
        sa.Column("category_ids", sa.Text(), nullable=False),
        sa.Column("attributes", sa.JSON(), nullable=False),
        sa.Column("media_asset_id", sa.String(), nullable=True),
        sa.Column("image_url", sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_product"),
        sa.UniqueConstraint(
            "store_id",
            "external_source",
            "external_id",
            name="uq_product_store_source_external",
        ),
    )
    op.create_index("ix_product_store_id", "product", ["store_id"])
    op.create_index("ix_product_store_slug", "product", ["store_id", "slug"])

    op.create_table(
        "integration_category_mapping",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("store_id", sa.Uuid(), nullable=False),
        sa.Column("integration_source", sa.String(ENUM_LENGTH), nullable=False),
        sa.Column("external_category_id", sa.String(), nullable=True),
        sa.Column("external_category_code", sa.String(), nullable=False),
        sa.Column("external_category_name", sa.String(), nullable=True),
        sa.Column("external_parent_code", sa.String(), nullable=True),
        sa.Column("internal_category_id", sa.Uuid(), nullable=True),
        sa.Column("mapping_type", sa.String(ENUM_LENGTH), nullable=False),
        sa.Column("confidence_score", sa.Float(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("auto_created", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["internal_category_id"],
            ["category.id"],
            name="fk_integration_category_mapping_internal_category_id_category",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_integration_category_mapping"),
        sa.UniqueConstraint(
            "store_id",
            "integration_source",
            "external_category_code",
            name="uq_category_mapping_store_source_code",
        ),
    )
    op.create_index(
        "ix_integration_category_mapping_store_id",
        "integration_category_mapping",
        ["store_id"],
    )
    op.create_index(
        "ix_category_mapping_store_source_external_id",
        "integration_category_mapping",
        ["store_id", "integration_source", "external_category_id"],
    )

    op.create_table(
        "attribute_definition",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("store_id", sa.Uuid(), nullable=False),
        sa.Column("code", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_attribute_definition"),
        sa.UniqueConstraint("store_id", "code", name="uq_attribute_definition_store_code"),
    )
    op.create_index("ix_attribute_definition_store_id", "attribute_definition", ["store_id"])

    op.create_table(
        "attribute_set",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("store_id", sa.Uuid(), nullable=False),
        sa.Column("integration_source", sa.String(ENUM_LENGTH), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("attribute_ids", sa.Text(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_attribute_set"),
        sa.UniqueConstraint(
            "store_id", "integration_source", name="uq_attribute_set_store_source"
        ),
    )
    op.create_index("ix_attribute_set_store_id", "attribute_set", ["store_id"])

    op.create_table(
        "import_statistics",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("store_id", sa.Uuid(), nullable=False),
        sa.Column("entity_type", sa.String(ENUM_LENGTH), nullable=False),
        sa.Column("source", sa.String(ENUM_LENGTH), nullable=False),
        sa.Column("method", sa.String(ENUM_LENGTH), nullable=False),
        sa.Column("total", sa.Integer(), nullable=False),
        sa.Column("imported", sa.Integer(), nullable=False),
        sa.Column("skipped", sa.Integer(), nullable=False),
        sa.Column("failed", sa.Integer(), nullable=False),
        sa.Column("error_details", sa.JSON(), nullable=False),
        sa.Column("processing_seconds", sa.Float(), nullable=True),
        sa.Column("imported_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_import_statistics"),
    )
    op.create_index("ix_import_statistics_store_id", "import_statistics", ["store_id"])


def downgrade() -> None:
    op.drop_table("import_statistics")
    op.drop_table("attribute_set")
    op.drop_table("attribute_definition")
    op.drop_table("integration_category_mapping")
    op.drop_table("product")
    op.drop_table("category")
