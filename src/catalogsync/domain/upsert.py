"""Idempotent create-or-update of internal categories and products."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from catalogsync.domain.model import (
    Category,
    ExternalCategory,
    FailureKind,
    ImportFailure,
    Product,
)
from catalogsync.domain.ports.collaborators import UploadOptions
from catalogsync.domain.slugs import slugify

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from uuid import UUID

    from catalogsync.domain.catalog_import.settings import ImportSettings
    from catalogsync.domain.mapping.resolver import CategoryMappingResolver
    from catalogsync.domain.model import (
        ExternalImage,
        ExternalProduct,
        IntegrationSource,
    )
    from catalogsync.domain.ports.collaborators import (
        AttributeResolver,
        ImageDownloader,
        StorageUploader,
        StoredAsset,
    )
    from catalogsync.domain.ports.persistence import CategoryRepository, ProductRepository
    from catalogsync.domain.ports.unit_of_work import CatalogUnitOfWork

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UpsertOutcome[TEntity]:
    entity: TEntity
    created: bool
    side_effect_failures: tuple[ImportFailure, ...] = ()
    created_attribute_ids: tuple[UUID, ...] = ()


class CatalogUpsertEngine:
    """Write external records into the store's catalog, one committed row at a time.

    Identity is looked up by ``(source, external_id)`` first and by slug second, so a
    repeated run updates the row created by an earlier one. Image and attribute
    handling are side effects: their failures come back in the outcome instead of
    being raised.
    """

    def __init__(
        self,
        uow: CatalogUnitOfWork,
        *,
        store_id: UUID,
        source: IntegrationSource,
        resolver: CategoryMappingResolver,
        settings: ImportSettings,
        storage: StorageUploader | None = None,
        images: ImageDownloader | None = None,
        attributes: AttributeResolver | None = None,
    ) -> None:
        self.uow = uow
        self.store_id = store_id
        self.source = source
        self.resolver = resolver
        self.settings = settings
        self.storage = storage
        self.images = images
        self.attributes = attributes
        self._root_category_id: UUID | None = None

    @property
    def _categories(self) -> CategoryRepository:
        return self.uow.repositories.categories

    @property
    def _products(self) -> ProductRepository:
        return self.uow.repositories.products

    # Categories -----------------------------------------------------------------

    def find_existing_category(self, external: ExternalCategory) -> Category | None:
        existing = self._categories.get_by_external_id(self.source, external.external_id)
        if existing is not None:
            return existing
        by_slug = self._categories.get_by_slug(self._category_slug(external))
        if by_slug is not None and self._adoptable(by_slug.external_source, by_slug.external_id):
            return by_slug
        return None

    def upsert_category(
        self,
        external: ExternalCategory,
        *,
        parent_external_id: str | None = None,
    ) -> UpsertOutcome[Category]:
        """Create or update ``external``; its parent must already be persisted.

        ``parent_external_id`` of ``None`` stores the category at the root level. A
        parent that cannot be found is treated the same way.
        """

        failures: list[ImportFailure] = []
        category = self.find_existing_category(external)
        created = category is None
        slug = self._category_slug(external)
        owner = self._categories.get_by_slug(slug)
        if owner is not None and owner is not category:
            slug = self._disambiguate(slug, external.external_id)

        parent = None
        if parent_external_id is not None:
            parent = self._categories.get_by_external_id(self.source, parent_external_id)
            if parent is None:
                log.warning(
                    "Parent %s of category %s is not stored yet; importing at root level",
                    parent_external_id,
                    external.external_id,
                )

        asset = self._store_image(
            external.image,
            folder="categories",
            stem=slug,
            failure_kind=FailureKind.CATEGORY_IMAGE,
            external_id=external.external_id,
            name=external.name,
            failures=failures,
        )

        if category is None:
            category = Category(store_id=self.store_id, name=external.name, slug=slug)
            self._categories.add(category)
        else:
            category.touch()

        category.name = external.name
        category.slug = slug
        category.description = external.description
        category.is_active = external.is_active
        category.sort_order = external.sort_order
        category.link_external(self.source, external.external_id)
        if asset is not None:
            category.media_asset_id = asset.asset_id
            category.image_url = asset.url
        category.attach_to(parent)

        self.uow.commit()
        return UpsertOutcome(category, created, tuple(failures))

    def ensure_root_category(self) -> Category:
        if self._root_category_id is not None:
            cached = self._categories.get(self._root_category_id)
            if cached is not None:
                return cached

        root = self._categories.get_by_slug(self.settings.root_category_slug)
        if root is None:
            root = Category(
                store_id=self.store_id,
                name=self.settings.root_category_name,
                slug=self.settings.root_category_slug,
            )
            self._categories.add(root)
            self.uow.commit()
            log.info("Created root category %s", root.slug)
        self._root_category_id = root.id
        return root

    # Products -------------------------------------------------------------------

    def find_existing_product(self, external: ExternalProduct) -> Product | None:
        existing = self._products.get_by_external_id(self.source, external.external_id)
        if existing is not None:
            return existing
        by_slug = self._products.get_by_slug(self._product_slug(external))
        if by_slug is not None and self._adoptable(by_slug.external_source, by_slug.external_id):
            return by_slug
        return None

    def upsert_product(
        self,
        external: ExternalProduct,
        *,
        category_lookup: Mapping[str, ExternalCategory] | None = None,
    ) -> UpsertOutcome[Product]:
        failures: list[ImportFailure] = []

        category_ids = self.expand_with_ancestors(
            self.resolve_product_categories(external, category_lookup=category_lookup)
        )
        if not category_ids:
            category_ids = [self.ensure_root_category().id]

        product = self.find_existing_product(external)
        created = product is None
        slug = self._product_slug(external)
        owner = self._products.get_by_slug(slug)
        if owner is not None and owner is not product:
            slug = self._disambiguate(slug, external.external_id)

        image = external.primary_image
        asset = self._store_image(
            image,
            folder="products",
            stem=slug,
            failure_kind=FailureKind.PRODUCT_IMAGE,
            external_id=external.external_id,
            name=external.name,
            failures=failures,
        )

        if product is None:
            product = Product(store_id=self.store_id, name=external.name, slug=slug)
            self._products.add(product)
        else:
            product.touch()

        product.name = external.name
        product.slug = slug
        product.sku = external.sku
        product.status = external.status
        product.price = external.price
        product.description = external.description
        product.link_external(self.source, external.external_id)
        product.assign_categories(category_ids)
        if asset is not None:
            product.media_asset_id = asset.asset_id
            product.image_url = asset.url

        self.uow.commit()

        created_attribute_ids = self._apply_attributes(product, external, failures)
        return UpsertOutcome(product, created, tuple(failures), created_attribute_ids)

    def resolve_product_categories(
        self,
        external: ExternalProduct,
        *,
        category_lookup: Mapping[str, ExternalCategory] | None = None,
    ) -> list[UUID]:
        """Resolve the product's own (leaf) categories, without ancestors."""

        if not external.categories:
            return []

        mapped = self.resolver.get_internal_category_ids(external.category_codes)
        resolved: list[UUID] = []
        for ref in external.categories:
            category_id = mapped.get(ref.code)
            if category_id is None:
                direct = self._categories.get_by_external_id(self.source, ref.external_id)
                category_id = direct.id if direct is not None else None
            if category_id is None and self.settings.auto_create_categories:
                known = (category_lookup or {}).get(ref.code)
                candidate = known or ExternalCategory(
                    external_id=ref.external_id,
                    code=ref.code,
                    name=ref.name or ref.code,
                )
                # a bare reference carries no hierarchy, so stored metadata stays
                created = self.resolver.resolve_categories_with_auto_create(
                    [candidate], describe=known is not None
                )
                category_id = created[0] if created else None
            if category_id is None:
                log.debug(
                    "Product %s: no internal category for %s code %s",
                    external.external_id,
                    self.source,
                    ref.code,
                )
                continue
            resolved.append(category_id)
        return resolved

    def expand_with_ancestors(self, category_ids: Iterable[UUID]) -> list[UUID]:
        """Add every transitive parent; each leaf keeps its place before its ancestors."""

        expanded: list[UUID] = []
        seen: set[UUID] = set()
        for category_id in category_ids:
            current: UUID | None = category_id
            while current is not None and current not in seen:
                category = self._categories.get(current)
                if category is None:
                    break
                seen.add(current)
                expanded.append(current)
                current = category.parent_id
        return expanded

    # Side effects ---------------------------------------------------------------

    def _apply_attributes(
        self,
        product: Product,
        external: ExternalProduct,
        failures: list[ImportFailure],
    ) -> tuple[UUID, ...]:
        if self.attributes is None or not external.raw_attributes:
            return ()
        try:
            resolution = self.attributes.resolve(self.store_id, external.raw_attributes)
            product.apply_attributes(resolution.attributes)
            self.uow.commit()
        except Exception as exc:  # noqa: BLE001
            self.uow.rollback()
            log.warning("Attribute sync failed for product %s: %s", external.external_id, exc)
            failures.append(
                ImportFailure(
                    kind=FailureKind.PRODUCT_ATTRIBUTES,
                    external_id=external.external_id,
                    name=external.name,
                    message=f"Attribute sync failed: {exc}",
                )
            )
            return ()
        return resolution.created_attribute_ids

    def _store_image(
        self,
        image: ExternalImage | None,
        *,
        folder: str,
        stem: str,
        failure_kind: FailureKind,
        external_id: str,
        name: str,
        failures: list[ImportFailure],
    ) -> StoredAsset | None:
        if image is None or self.images is None or self.storage is None:
            return None
        try:
            downloaded = self.images(image.url)
            suffix = PurePosixPath(downloaded.filename).suffix
            return self.storage.upload(
                self.store_id,
                downloaded.content,
                UploadOptions(
                    filename=f"{stem}{suffix}",
                    folder=folder,
                    content_type=downloaded.content_type,
                ),
            )
        except Exception as exc:  # noqa: BLE001
            log.warning("Image import failed for %s %s: %s", folder, external_id, exc)
            failures.append(
                ImportFailure(
                    kind=failure_kind,
                    external_id=external_id,
                    name=name,
                    message=f"Image import failed for {image.url}: {exc}",
                )
            )
            return None

    def _adoptable(self, source: IntegrationSource | None, external_id: str | None) -> bool:
        """A row found by slug is reused unless another record of this source owns it."""

        return external_id is None or source != self.source

    @staticmethod
    def _disambiguate(slug: str, external_id: str) -> str:
        return f"{slug}-{slugify(external_id)}"

    @staticmethod
    def _category_slug(external: ExternalCategory) -> str:
        return external.slug or slugify(external.name) or slugify(external.code)

    @staticmethod
    def _product_slug(external: ExternalProduct) -> str:
        return (
            external.slug
            or slugify(external.name)
            or slugify(external.sku)
            or slugify(external.external_id)
        )
