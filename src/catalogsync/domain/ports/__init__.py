"""Ports bridging the domain with adapters."""

from __future__ import annotations

from .collaborators import (
    AttributeResolution,
    AttributeResolver,
    AttributeSetRegistry,
    DownloadedImage,
    ImageDownloader,
    StatisticsSink,
    StorageUploader,
    StoredAsset,
    UploadOptions,
)
from .fetching import (
    CatalogFetcher,
    ConnectionCheck,
    FetchProgress,
    PageCallback,
    ProductQuery,
)
from .persistence import (
    CategoryMappingRepository,
    CategoryRepository,
    ProductRepository,
)
from .unit_of_work import (
    CatalogRepositories,
    CatalogUnitOfWork,
    RepositoryCollection,
    StoreConnectionProvider,
    UnitOfWork,
)

__all__ = [
    "AttributeResolution",
    "AttributeResolver",
    "AttributeSetRegistry",
    "CatalogFetcher",
    "CatalogRepositories",
    "CatalogUnitOfWork",
    "CategoryMappingRepository",
    "CategoryRepository",
    "ConnectionCheck",
    "DownloadedImage",
    "FetchProgress",
    "ImageDownloader",
    "PageCallback",
    "ProductQuery",
    "ProductRepository",
    "RepositoryCollection",
    "StatisticsSink",
    "StorageUploader",
    "StoreConnectionProvider",
    "StoredAsset",
    "UnitOfWork",
    "UploadOptions",
]
