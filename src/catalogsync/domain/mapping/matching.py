"""Priority-ordered auto-match ladder for external categories.

Tiers, first match wins:

1. normalised slug equality (``1.0``)
2. case-insensitive trimmed name equality (``0.95``)
3. normalised external code equal to a normalised internal slug (``0.9``)
4. substring containment in either direction with a length ratio of at least
   ``0.7`` (``0.7``)

Several candidates can satisfy the same tier. Candidates are therefore ranked by
``(level, lowercased name, id)`` before any tier runs, so the shallowest category wins
and the outcome never depends on database row order. In tier 4 the highest length
ratio wins before that ranking applies.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from fractions import Fraction
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from uuid import UUID

    from catalogsync.domain.model import Category

PARTIAL_MATCH_MIN_RATIO: Final[Fraction] = Fraction(7, 10)


class MatchStrategy(StrEnum):
    SLUG = "slug"
    NAME = "name"
    CODE = "code"
    PARTIAL = "partial"


CONFIDENCE: Final[dict[MatchStrategy, float]] = {
    MatchStrategy.SLUG: 1.0,
    MatchStrategy.NAME: 0.95,
    MatchStrategy.CODE: 0.9,
    MatchStrategy.PARTIAL: 0.7,
}


@dataclass(frozen=True, slots=True)
class MatchCandidate:
    category_id: UUID
    name: str
    slug: str
    level: int = 0

    @classmethod
    def from_category(cls, category: Category) -> MatchCandidate:
        return cls(
            category_id=category.id,
            name=category.name,
            slug=category.slug,
            level=category.level,
        )


@dataclass(frozen=True, slots=True)
class AutoMatch:
    category_id: UUID
    strategy: MatchStrategy

    @property
    def confidence(self) -> float:
        return CONFIDENCE[self.strategy]


def normalize_slug(value: str | None) -> str:
    if not value:
        return ""
    return value.lower().replace("-", "").replace("_", "")


def normalize_name(value: str | None) -> str:
    if not value:
        return ""
    return value.strip().lower()


def partial_ratio(left: str, right: str) -> Fraction | None:
    """Length ratio of two normalised names when one contains the other."""

    if not left or not right:
        return None
    if left not in right and right not in left:
        return None
    return Fraction(min(len(left), len(right)), max(len(left), len(right)))


def rank_candidates(candidates: Iterable[MatchCandidate]) -> list[MatchCandidate]:
    return sorted(
        candidates,
        key=lambda candidate: (
            candidate.level,
            normalize_name(candidate.name),
            str(candidate.category_id),
        ),
    )


def find_auto_match(
    *,
    code: str,
    name: str | None,
    slug: str | None,
    candidates: Iterable[MatchCandidate],
) -> AutoMatch | None:
    """Run the ladder for one external category; ``None`` means unmapped."""

    ranked = rank_candidates(candidates)
    if not ranked:
        return None

    external_slug = normalize_slug(slug or code)
    external_name = normalize_name(name)
    external_code = normalize_slug(code)

    if external_slug:
        for candidate in ranked:
            if normalize_slug(candidate.slug) == external_slug:
                return AutoMatch(candidate.category_id, MatchStrategy.SLUG)

    if external_name:
        for candidate in ranked:
            if normalize_name(candidate.name) == external_name:
                return AutoMatch(candidate.category_id, MatchStrategy.NAME)

    if external_code:
        for candidate in ranked:
            if normalize_slug(candidate.slug) == external_code:
                return AutoMatch(candidate.category_id, MatchStrategy.CODE)

    return _best_partial_match(external_name, ranked)


def _best_partial_match(
    external_name: str, ranked: Sequence[MatchCandidate]
) -> AutoMatch | None:
    best: tuple[Fraction, MatchCandidate] | None = None
    for candidate in ranked:
        ratio = partial_ratio(external_name, normalize_name(candidate.name))
        if ratio is None or ratio < PARTIAL_MATCH_MIN_RATIO:
            continue
        # strict comparison keeps the higher-ranked candidate on ties
        if best is None or ratio > best[0]:
            best = (ratio, candidate)
    if best is None:
        return None
    return AutoMatch(best[1].category_id, MatchStrategy.PARTIAL)
