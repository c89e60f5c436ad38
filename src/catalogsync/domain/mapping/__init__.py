"""Category identity resolution: the auto-match ladder and the mapping resolver."""

from __future__ import annotations

from .matching import (
    AutoMatch,
    MatchCandidate,
    MatchStrategy,
    find_auto_match,
    normalize_name,
    normalize_slug,
)
from .resolver import AutoMatchSummary, CategoryMappingResolver, SyncResult

__all__ = [
    "AutoMatch",
    "AutoMatchSummary",
    "CategoryMappingResolver",
    "MatchCandidate",
    "MatchStrategy",
    "SyncResult",
    "find_auto_match",
    "normalize_name",
    "normalize_slug",
]
