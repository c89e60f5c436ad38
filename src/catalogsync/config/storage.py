"""Where the catalog database and downloaded media live."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

DEFAULT_DATA_DIR: Final[Path] = Path("~/.local/share/catalogsync")
DATABASE_FILENAME: Final[str] = "catalogsync.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Local data directory plus the public URL media files are served under, if any."""

    data_dir: Path
    media_base_url: str | None = None

    def _root(self) -> Path:
        root = self.data_dir.expanduser().resolve()
        root.mkdir(parents=True, exist_ok=True)
        return root

    def media_path(self) -> Path:
        return self._root() / "media"

    def database_uri(self) -> str:
        return f"sqlite+pysqlite:///{self._root() / DATABASE_FILENAME}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def _data_dir() -> Path:
    override = os.getenv("CATALOGSYNC_DATA_DIR")
    if override:
        return Path(override)
    xdg_home = os.getenv("XDG_DATA_HOME")
    return Path(xdg_home) / "catalogsync" if xdg_home else DEFAULT_DATA_DIR


def get_storage_config() -> StorageConfig:
    return StorageConfig(
        data_dir=_data_dir(),
        media_base_url=os.getenv("CATALOGSYNC_MEDIA_BASE_URL") or None,
    )


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """``DATABASE_URI`` wins; otherwise a SQLite file in the data directory."""

    env_uri = os.getenv("DATABASE_URI")
    if env_uri:
        return DatabaseConfig(uri=env_uri)
    return DatabaseConfig(uri=(storage or get_storage_config()).database_uri())
