"""Parent-before-child ordering of external categories.

Categories are copied into an arena and parent references become indices into it,
so walking the tree never recurses. A node is admitted in a pass only when its
parent was admitted in an earlier pass, and there are at most ``len(categories)``
passes. Whatever is left after the last pass (orphans whose parent never arrives,
members of cycles) is appended in input order and flagged ``detached`` so the
caller stores it without a parent.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Sequence

    from catalogsync.domain.model import ExternalCategory

_ROOT: Final = -1
_MISSING: Final = -2


@dataclass(frozen=True, slots=True)
class SequencedCategory:
    category: ExternalCategory
    detached: bool = False

    @property
    def parent_code(self) -> str | None:
        return None if self.detached else self.category.parent_code


def _parent_indices(categories: Sequence[ExternalCategory]) -> list[int]:
    index_by_code: dict[str, int] = {}
    for index, category in enumerate(categories):
        index_by_code.setdefault(category.code, index)

    parents: list[int] = []
    for index, category in enumerate(categories):
        if category.parent_code is None:
            parents.append(_ROOT)
            continue
        parent_index = index_by_code.get(category.parent_code, _MISSING)
        # self references can never be satisfied
        parents.append(_MISSING if parent_index == index else parent_index)
    return parents


def sequence_categories(categories: Sequence[ExternalCategory]) -> list[SequencedCategory]:
    parents = _parent_indices(categories)
    scheduled = [parent == _ROOT for parent in parents]
    ordered = [SequencedCategory(categories[i]) for i, done in enumerate(scheduled) if done]

    for _ in range(len(categories)):
        admitted = [
            index
            for index, parent in enumerate(parents)
            if not scheduled[index] and parent >= 0 and scheduled[parent]
        ]
        if not admitted:
            break
        # mark after collecting so a pass only sees parents from earlier passes
        for index in admitted:
            scheduled[index] = True
            ordered.append(SequencedCategory(categories[index]))

    ordered.extend(
        SequencedCategory(categories[index], detached=True)
        for index, done in enumerate(scheduled)
        if not done
    )
    return ordered
