"""Ports for collaborators the import core calls but does not own."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID

    from catalogsync.domain.model import ImportMethod, ImportRunStatistics, IntegrationSource


@dataclass(frozen=True, slots=True)
class UploadOptions:
    filename: str
    folder: str
    content_type: str | None = None


@dataclass(frozen=True, slots=True)
class StoredAsset:
    url: str
    asset_id: str


@dataclass(frozen=True, slots=True)
class DownloadedImage:
    content: bytes
    content_type: str
    filename: str


@dataclass(frozen=True, slots=True)
class AttributeResolution:
    attributes: Mapping[str, str] = field(default_factory=dict[str, str])
    created_attribute_ids: tuple[UUID, ...] = ()


class StorageUploader(Protocol):
    def upload(self, store_id: UUID, data: bytes, options: UploadOptions) -> StoredAsset: ...


class ImageDownloader(Protocol):
    def __call__(self, url: str) -> DownloadedImage: ...


class AttributeResolver(Protocol):
    """Normalise raw key/value pairs, creating attribute definitions as needed."""

    def resolve(self, store_id: UUID, raw: Mapping[str, str]) -> AttributeResolution: ...


class AttributeSetRegistry(Protocol):
    def assign(
        self,
        store_id: UUID,
        source: IntegrationSource,
        attribute_ids: Iterable[UUID],
    ) -> None: ...


class StatisticsSink(Protocol):
    def record(
        self,
        store_id: UUID,
        stats: ImportRunStatistics,
        *,
        source: IntegrationSource,
        method: ImportMethod,
        processing_seconds: float | None = None,
    ) -> None: ...
