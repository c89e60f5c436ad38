from __future__ import annotations

import uuid
from fractions import Fraction

import pytest

from catalogsync.domain.mapping import MatchCandidate, MatchStrategy, find_auto_match
from catalogsync.domain.mapping.matching import partial_ratio


def _candidate(name: str, slug: str, *, level: int = 0) -> MatchCandidate:
    return MatchCandidate(category_id=uuid.uuid4(), name=name, slug=slug, level=level)


def test_slug_match_wins_over_name_match() -> None:
    by_name = _candidate("Shoes", "footwear", level=0)
    by_slug = _candidate("Sneakers & More", "shoes", level=3)

    match = find_auto_match(
        code="cat-1", name="Shoes", slug="shoes", candidates=[by_name, by_slug]
    )

    assert match is not None
    assert match.category_id == by_slug.category_id
    assert match.strategy is MatchStrategy.SLUG
    assert match.confidence == 1.0


def test_slug_comparison_ignores_case_dashes_and_underscores() -> None:
    candidate = _candidate("Something Else", "Home-Garden")

    match = find_auto_match(
        code="x", name="Unrelated", slug="home_garden", candidates=[candidate]
    )

    assert match is not None
    assert match.strategy is MatchStrategy.SLUG


def test_name_match_is_trimmed_and_case_insensitive() -> None:
    candidate = _candidate("Kitchen Tools", "kitchen")

    match = find_auto_match(
        code="k1", name="  KITCHEN tools ", slug="tools-for-kitchen", candidates=[candidate]
    )

    assert match is not None
    assert match.strategy is MatchStrategy.NAME
    assert match.confidence == pytest.approx(0.95)


def test_code_matches_internal_slug_when_slug_and_name_differ() -> None:
    candidate = _candidate("Garden", "outdoor_living")

    match = find_auto_match(
        code="OUTDOOR-LIVING", name="Patio", slug="patio", candidates=[candidate]
    )

    assert match is not None
    assert match.strategy is MatchStrategy.CODE
    assert match.confidence == pytest.approx(0.9)


def test_partial_match_accepts_ratio_of_exactly_seventy_percent() -> None:
    candidate = _candidate("x" * 10, "candidate")

    match = find_auto_match(code="c1", name="x" * 7, slug="external", candidates=[candidate])

    assert partial_ratio("x" * 7, "x" * 10) == Fraction(7, 10)
    assert match is not None
    assert match.strategy is MatchStrategy.PARTIAL
    assert match.confidence == pytest.approx(0.7)


def test_partial_match_rejects_ratio_below_seventy_percent() -> None:
    candidate = _candidate("x" * 100, "candidate")

    match = find_auto_match(code="c1", name="x" * 69, slug="external", candidates=[candidate])

    assert match is None


def test_partial_match_works_in_both_directions() -> None:
    candidate = _candidate("Bags", "bags-internal")

    match = find_auto_match(code="c1", name="Bags!", slug="external", candidates=[candidate])

    assert match is not None
    assert match.category_id == candidate.category_id
    assert match.strategy is MatchStrategy.PARTIAL


def test_no_candidates_means_unmapped() -> None:
    assert find_auto_match(code="c1", name="Shoes", slug="shoes", candidates=[]) is None


def test_tie_prefers_shallowest_category() -> None:
    deep = _candidate("Shoes", "deep-shoes", level=2)
    shallow = _candidate("Shoes", "shallow-shoes", level=0)

    match = find_auto_match(code="c1", name="Shoes", slug="x", candidates=[deep, shallow])

    assert match is not None
    assert match.category_id == shallow.category_id


def test_tie_on_level_falls_back_to_name_then_id() -> None:
    first_id = uuid.UUID(int=1)
    second_id = uuid.UUID(int=2)
    second = MatchCandidate(category_id=second_id, name="Shirts", slug="shirts-b")
    first = MatchCandidate(category_id=first_id, name="Shirts", slug="shirts-a")

    match = find_auto_match(code="c1", name="shirts", slug="x", candidates=[second, first])

    assert match is not None
    assert match.category_id == first_id


def test_partial_tier_prefers_highest_ratio_over_ranking() -> None:
    loose = _candidate("Winter Coats", "coats-a", level=0)  # 10/12
    close = _candidate("Winter Coat", "coats-b", level=4)  # 10/11

    match = find_auto_match(
        code="c1", name="Winter Coa", slug="x", candidates=[loose, close]
    )

    assert match is not None
    assert match.category_id == close.category_id


def test_result_does_not_depend_on_candidate_order() -> None:
    candidates = [
        _candidate("Lamps", "lamps-1", level=1),
        _candidate("Lamps", "lamps-2", level=1),
        _candidate("Lamps", "lamps-3", level=1),
    ]

    forward = find_auto_match(code="c", name="Lamps", slug="x", candidates=candidates)
    backward = find_auto_match(
        code="c", name="Lamps", slug="x", candidates=list(reversed(candidates))
    )

    assert forward == backward
