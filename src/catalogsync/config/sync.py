"""Import defaults for catalog synchronisation runs."""

from __future__ import annotations

import os

from catalogsync.domain.catalog_import.settings import (
    DEFAULT_ROOT_CATEGORY_SLUG,
    ImportSettings,
)

from .env import env_flag


def get_import_settings() -> ImportSettings:
    return ImportSettings(
        root_category_slug=os.getenv("CATALOGSYNC_ROOT_CATEGORY_SLUG")
        or DEFAULT_ROOT_CATEGORY_SLUG,
        auto_create_categories=env_flag("CATALOGSYNC_AUTO_CREATE_CATEGORIES", default=False),
    )
