"""Image download over HTTP and asset storage on the local filesystem."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Final
from urllib.parse import urlsplit
from uuid import NAMESPACE_URL, uuid5

from catalogsync.adapters.http_resilience import (
    ClientFactory,
    ResilienceConfig,
    default_client_factory,
)
from catalogsync.domain.ports.collaborators import DownloadedImage, StoredAsset

if TYPE_CHECKING:
    from uuid import UUID

    from catalogsync.domain.ports.collaborators import (
        ImageDownloader,
        StorageUploader,
        UploadOptions,
    )

DEFAULT_IMAGE_EXTENSION: Final[str] = ".jpg"
IMAGE_TYPES: Final[dict[str, str]] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
}


def guess_image_type(url: str) -> tuple[str, str]:
    """Return ``(extension, mime type)`` from the URL path, defaulting to JPEG."""

    suffix = PurePosixPath(urlsplit(url).path).suffix.lower()
    if suffix not in IMAGE_TYPES:
        suffix = DEFAULT_IMAGE_EXTENSION
    return suffix, IMAGE_TYPES[suffix]


def _default_resilience_config() -> ResilienceConfig:
    return ResilienceConfig(name="images", timeout_seconds=30.0)


@dataclass(slots=True)
class HttpImageDownloader:
    resilience: ResilienceConfig = field(default_factory=_default_resilience_config)
    client_factory: ClientFactory = field(default=default_client_factory)

    def __call__(self, url: str) -> DownloadedImage:
        return asyncio.run(self._download(url))

    async def _download(self, url: str) -> DownloadedImage:
        async with self.client_factory(self.resilience) as client:
            response = await client.get(url, follow_redirects=True)
        response.raise_for_status()

        extension, mime_type = guess_image_type(url)
        stem = PurePosixPath(urlsplit(url).path).stem or "image"
        content_type = response.headers.get("content-type", "").split(";")[0].strip()
        return DownloadedImage(
            content=response.content,
            content_type=content_type if content_type.startswith("image/") else mime_type,
            filename=f"{stem}{extension}",
        )


@dataclass(slots=True)
class LocalFileStorage:
    """Write assets under ``root/<store>/<folder>/``.

    Asset ids derive from the stored path, so re-importing the same image yields the
    same id and overwrites the same file.
    """

    root: Path
    base_url: str | None = None

    def upload(self, store_id: UUID, data: bytes, options: UploadOptions) -> StoredAsset:
        folder = self.root / str(store_id) / options.folder
        folder.mkdir(parents=True, exist_ok=True)
        path = folder / PurePosixPath(options.filename).name
        path.write_bytes(data)

        relative = path.relative_to(self.root).as_posix()
        if self.base_url:
            url = f"{self.base_url.rstrip('/')}/{relative}"
        else:
            url = path.resolve().as_uri()
        return StoredAsset(url=url, asset_id=str(uuid5(NAMESPACE_URL, relative)))


if TYPE_CHECKING:
    _downloader_check: ImageDownloader = HttpImageDownloader()
    _storage_check: StorageUploader = LocalFileStorage(Path())
