"""Store-scoped repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import case, or_, select

from catalogsync.adapters.sqlalchemy.mappings import (
    category_mapping_table,
    category_table,
    product_table,
)
from catalogsync.domain.model import Category, CategoryMapping, Product

if TYPE_CHECKING:
    import uuid
    from collections.abc import Iterable

    from sqlalchemy.orm import Session

    from catalogsync.domain.model import IntegrationSource


class SqlAlchemyCategoryRepository:
    def __init__(self, session: Session, store_id: uuid.UUID) -> None:
        self.session = session
        self.store_id = store_id

    def add(self, entity: Category) -> None:
        if entity.store_id != self.store_id:
            raise ValueError(f"entity belongs to store {entity.store_id}, not {self.store_id}")
        self.session.add(entity)

    def get(self, category_id: uuid.UUID) -> Category | None:
        stmt = (
            select(Category)
            .where(category_table.c.store_id == self.store_id)
            .where(category_table.c.id == category_id)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def get_by_external_id(self, source: IntegrationSource, external_id: str) -> Category | None:
        stmt = (
            select(Category)
            .where(category_table.c.store_id == self.store_id)
            .where(category_table.c.external_source == source)
            .where(category_table.c.external_id == external_id)
            .limit(1)
        )
        return self.session.execute(stmt).scalars().first()

    def get_by_slug(self, slug: str) -> Category | None:
        stmt = (
            select(Category)
            .where(category_table.c.store_id == self.store_id)
            .where(category_table.c.slug == slug)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list_active(self) -> list[Category]:
        stmt = (
            select(Category)
            .where(category_table.c.store_id == self.store_id)
            .where(category_table.c.is_active.is_(True))
        )
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyProductRepository:
    def __init__(self, session: Session, store_id: uuid.UUID) -> None:
        self.session = session
        self.store_id = store_id

    def add(self, entity: Product) -> None:
        if entity.store_id != self.store_id:
            raise ValueError(f"entity belongs to store {entity.store_id}, not {self.store_id}")
        self.session.add(entity)

    def get_by_external_id(self, source: IntegrationSource, external_id: str) -> Product | None:
        stmt = (
            select(Product)
            .where(product_table.c.store_id == self.store_id)
            .where(product_table.c.external_source == source)
            .where(product_table.c.external_id == external_id)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def get_by_slug(self, slug: str) -> Product | None:
        stmt = (
            select(Product)
            .where(product_table.c.store_id == self.store_id)
            .where(product_table.c.slug == slug)
            .limit(1)
        )
        return self.session.execute(stmt).scalars().first()


class SqlAlchemyCategoryMappingRepository:
    def __init__(self, session: Session, store_id: uuid.UUID) -> None:
        self.session = session
        self.store_id = store_id

    def add(self, entity: CategoryMapping) -> None:
        if entity.store_id != self.store_id:
            raise ValueError(f"entity belongs to store {entity.store_id}, not {self.store_id}")
        self.session.add(entity)

    def find(
        self,
        source: IntegrationSource,
        *,
        code: str,
        external_id: str | None = None,
        active_only: bool = False,
    ) -> CategoryMapping | None:
        columns = category_mapping_table.c
        match = columns.external_category_code == code
        if external_id is not None:
            match = or_(match, columns.external_category_id == external_id)
        stmt = (
            select(CategoryMapping)
            .where(columns.store_id == self.store_id)
            .where(columns.integration_source == source)
            .where(match)
        )
        if active_only:
            stmt = stmt.where(columns.is_active.is_(True))
        # a row keyed by the code wins over one that only shares the external id
        stmt = stmt.order_by(case((columns.external_category_code == code, 0), else_=1)).limit(1)
        return self.session.execute(stmt).scalars().first()

    def list_for_source(self, source: IntegrationSource) -> list[CategoryMapping]:
        columns = category_mapping_table.c
        stmt = (
            select(CategoryMapping)
            .where(columns.store_id == self.store_id)
            .where(columns.integration_source == source)
            .order_by(columns.external_category_code)
        )
        return list(self.session.execute(stmt).scalars())

    def list_unmapped(self, source: IntegrationSource) -> list[CategoryMapping]:
        columns = category_mapping_table.c
        stmt = (
            select(CategoryMapping)
            .where(columns.store_id == self.store_id)
            .where(columns.integration_source == source)
            .where(columns.is_active.is_(True))
            .where(columns.internal_category_id.is_(None))
            .order_by(columns.external_category_code)
        )
        return list(self.session.execute(stmt).scalars())

    def internal_ids_for_codes(
        self, source: IntegrationSource, codes: Iterable[str]
    ) -> dict[str, uuid.UUID]:
        wanted = sorted(set(codes))
        if not wanted:
            return {}
        columns = category_mapping_table.c
        stmt = (
            select(columns.external_category_code, columns.internal_category_id)
            .where(columns.store_id == self.store_id)
            .where(columns.integration_source == source)
            .where(columns.is_active.is_(True))
            .where(columns.internal_category_id.is_not(None))
            .where(columns.external_category_code.in_(wanted))
        )
        return {code: internal_id for code, internal_id in self.session.execute(stmt)}


if TYPE_CHECKING:
    from catalogsync.domain.ports.persistence import (
        CategoryMappingRepository,
        CategoryRepository,
        ProductRepository,
    )

    _category_check: CategoryRepository = SqlAlchemyCategoryRepository(
        session=Session(), store_id=uuid.uuid4()
    )
    _product_check: ProductRepository = SqlAlchemyProductRepository(
        session=Session(), store_id=uuid.uuid4()
    )
    _mapping_check: CategoryMappingRepository = SqlAlchemyCategoryMappingRepository(
        session=Session(), store_id=uuid.uuid4()
    )
