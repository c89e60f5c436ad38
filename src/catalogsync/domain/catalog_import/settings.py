"""Tunables for one import run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

DEFAULT_ROOT_CATEGORY_SLUG: Final[str] = "root-catalog"
DEFAULT_ROOT_CATEGORY_NAME: Final[str] = "Root Catalog"
DEFAULT_PREVIEW_SIZE: Final[int] = 5


@dataclass(frozen=True, slots=True)
class ImportSettings:
    root_category_slug: str = DEFAULT_ROOT_CATEGORY_SLUG
    root_category_name: str = DEFAULT_ROOT_CATEGORY_NAME
    auto_create_categories: bool = False
    hide_auto_created: bool = True
    preview_size: int = DEFAULT_PREVIEW_SIZE
