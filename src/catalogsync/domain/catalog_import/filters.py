"""Selection criteria narrowing what an import run touches."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING

from catalogsync.domain.ports.fetching import ProductQuery

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import datetime

    from catalogsync.domain.model import ExternalCategory, ExternalProduct


def subtree_codes(categories: Iterable[ExternalCategory], roots: Iterable[str]) -> set[str]:
    """Codes of ``roots`` and all their descendants present in ``categories``.

    Descendants of a root that is itself missing from the batch are still selected.
    """

    present: set[str] = set()
    children: dict[str, list[str]] = {}
    for category in categories:
        present.add(category.code)
        if category.parent_code is not None:
            children.setdefault(category.parent_code, []).append(category.code)

    selected: set[str] = set()
    visited: set[str] = set()
    pending = list(roots)
    while pending:
        code = pending.pop()
        if code in visited:
            continue
        visited.add(code)
        if code in present:
            selected.add(code)
        pending.extend(children.get(code, ()))
    return selected


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportFilters:
    """Optional narrowing for category and product runs.

    Category filters are applied to the fetched batch: first ``category_codes``, then
    the ``root_categories`` subtrees. Product filters are handed to the platform as a
    :class:`ProductQuery`; ``families`` is checked again on the returned products
    because not every platform can filter by family.
    """

    category_codes: frozenset[str] = frozenset()
    root_categories: tuple[str, ...] = ()
    families: frozenset[str] = frozenset()
    channel: str | None = None
    min_completeness: int | None = None
    updated_within: timedelta | None = None

    def __post_init__(self) -> None:
        if self.min_completeness is not None:
            if not 0 < self.min_completeness <= 100:
                raise ValueError(
                    f"completeness must be between 1 and 100, got {self.min_completeness}"
                )
            if self.channel is None:
                raise ValueError("a completeness filter needs a channel")
        if self.updated_within is not None and self.updated_within <= timedelta(0):
            raise ValueError("the updated-within window must be positive")

    @property
    def narrows_categories(self) -> bool:
        return bool(self.category_codes or self.root_categories)

    def select_categories(
        self, categories: Sequence[ExternalCategory]
    ) -> list[ExternalCategory]:
        selected = list(categories)
        if self.category_codes:
            selected = [c for c in selected if c.code in self.category_codes]
        if self.root_categories:
            keep = subtree_codes(selected, self.root_categories)
            selected = [c for c in selected if c.code in keep]
        return selected

    def product_query(self, *, now: datetime) -> ProductQuery:
        return ProductQuery(
            updated_after=now - self.updated_within if self.updated_within else None,
            families=tuple(sorted(self.families)),
            channel=self.channel,
            min_completeness=self.min_completeness,
        )

    def accepts_product(self, product: ExternalProduct) -> bool:
        return not self.families or product.family in self.families
