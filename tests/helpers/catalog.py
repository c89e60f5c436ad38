"""Reusable fakes and builders for catalog import tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

from catalogsync.domain.errors import CatalogSyncError
from catalogsync.domain.model import (
    ExternalCategory,
    ExternalCategoryRef,
    ExternalImage,
    ExternalProduct,
    IntegrationSource,
    ProductStatus,
)
from catalogsync.domain.ports import (
    AttributeResolution,
    ConnectionCheck,
    DownloadedImage,
    FetchProgress,
    StoredAsset,
)

if TYPE_CHECKING:
    import uuid
    from collections.abc import Iterable, Mapping

    from catalogsync.domain.model import ImportMethod, ImportRunStatistics
    from catalogsync.domain.ports import PageCallback, ProductQuery, UploadOptions


def make_category(
    code: str,
    name: str | None = None,
    *,
    parent: str | None = None,
    external_id: str | None = None,
    slug: str | None = None,
    image_url: str | None = None,
) -> ExternalCategory:
    return ExternalCategory(
        external_id=external_id or code,
        code=code,
        name=name or code.title(),
        parent_code=parent,
        slug=slug,
        image=ExternalImage(url=image_url) if image_url else None,
    )


def make_product(
    external_id: str,
    name: str | None = None,
    *,
    categories: Iterable[str] = (),
    attributes: Mapping[str, str] | None = None,
    image_url: str | None = None,
    price: str | None = "9.99",
    family: str | None = None,
) -> ExternalProduct:
    return ExternalProduct(
        external_id=external_id,
        name=name or f"Product {external_id}",
        sku=f"SKU-{external_id}",
        status=ProductStatus.ACTIVE,
        price=Decimal(price) if price is not None else None,
        categories=tuple(
            ExternalCategoryRef(code=code, external_id=code) for code in categories
        ),
        raw_attributes=dict(attributes or {}),
        images=(ExternalImage(url=image_url),) if image_url else (),
        family=family,
    )


@dataclass
class FakeCatalogFetcher:
    """In-memory fetcher; set ``error`` to make every fetch fail."""

    categories: list[ExternalCategory] = field(default_factory=list[ExternalCategory])
    products: list[ExternalProduct] = field(default_factory=list[ExternalProduct])
    error: CatalogSyncError | None = None
    category_calls: int = 0
    product_calls: int = 0
    source_value: IntegrationSource = IntegrationSource.WOOCOMMERCE
    queries: list[ProductQuery | None] = field(default_factory=list)
    connection_error: CatalogSyncError | None = None

    @property
    def source(self) -> IntegrationSource:
        return self.source_value

    def fetch_categories(self, *, on_page: PageCallback | None = None) -> list[ExternalCategory]:
        self.category_calls += 1
        if self.error is not None:
            raise self.error
        if on_page is not None:
            on_page(FetchProgress(resource="categories", page=1, fetched=len(self.categories)))
        return list(self.categories)

    def fetch_products(
        self, *, on_page: PageCallback | None = None, query: ProductQuery | None = None
    ) -> list[ExternalProduct]:
        self.product_calls += 1
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        if on_page is not None:
            on_page(FetchProgress(resource="products", page=1, fetched=len(self.products)))
        return list(self.products)

    def check_connection(self) -> ConnectionCheck:
        if self.connection_error is not None:
            raise self.connection_error
        return ConnectionCheck(success=True, message=f"Connected to {self.source_value}")


@dataclass
class FakeImageDownloader:
    failing_urls: set[str] = field(default_factory=set[str])
    requested: list[str] = field(default_factory=list[str])

    def __call__(self, url: str) -> DownloadedImage:
        self.requested.append(url)
        if url in self.failing_urls:
            raise OSError(f"download failed for {url}")
        return DownloadedImage(content=b"image", content_type="image/png", filename="image.png")


@dataclass
class FakeStorage:
    uploads: list[tuple[uuid.UUID, UploadOptions]] = field(default_factory=list)

    def upload(self, store_id: uuid.UUID, data: bytes, options: UploadOptions) -> StoredAsset:
        del data
        self.uploads.append((store_id, options))
        path = f"{store_id}/{options.folder}/{options.filename}"
        return StoredAsset(url=f"https://cdn.example/{path}", asset_id=path)


@dataclass
class FakeAttributeResolver:
    fail: bool = False
    created: tuple[uuid.UUID, ...] = ()
    calls: list[Mapping[str, str]] = field(default_factory=list)

    def resolve(self, store_id: uuid.UUID, raw: Mapping[str, str]) -> AttributeResolution:
        del store_id
        self.calls.append(raw)
        if self.fail:
            raise RuntimeError("attribute service unavailable")
        return AttributeResolution(
            attributes={key.lower(): value for key, value in raw.items()},
            created_attribute_ids=self.created,
        )


@dataclass
class FakeAttributeSetRegistry:
    fail: bool = False
    assigned: list[tuple[IntegrationSource, list[uuid.UUID]]] = field(default_factory=list)

    def assign(
        self,
        store_id: uuid.UUID,
        source: IntegrationSource,
        attribute_ids: Iterable[uuid.UUID],
    ) -> None:
        del store_id
        if self.fail:
            raise RuntimeError("attribute set unavailable")
        self.assigned.append((source, list(attribute_ids)))


@dataclass
class FakeStatisticsSink:
    fail: bool = False
    records: list[tuple[ImportRunStatistics, ImportMethod]] = field(default_factory=list)

    def record(
        self,
        store_id: uuid.UUID,
        stats: ImportRunStatistics,
        *,
        source: IntegrationSource,
        method: ImportMethod,
        processing_seconds: float | None = None,
    ) -> None:
        del store_id, source, processing_seconds
        if self.fail:
            raise RuntimeError("statistics store unavailable")
        self.records.append((stats, method))
