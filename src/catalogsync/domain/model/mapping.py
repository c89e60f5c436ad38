"""External-to-internal category identity mappings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar
from uuid import UUID  # noqa: TC003

from catalogsync.domain.model.base import StoreScopedEntity
from catalogsync.domain.model.enums import IntegrationSource, MappingKind


@dataclass(frozen=True, slots=True)
class AutoMapping:
    """Link chosen by the auto-match ladder."""

    KIND: ClassVar[MappingKind] = MappingKind.AUTO

    confidence: float

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")


@dataclass(frozen=True, slots=True)
class ManualMapping:
    """Link set by an operator, or a row still awaiting review."""

    KIND: ClassVar[MappingKind] = MappingKind.MANUAL

    @property
    def confidence(self) -> float:
        return 1.0


type MappingType = AutoMapping | ManualMapping


@dataclass(eq=False, kw_only=True)
class CategoryMapping(StoreScopedEntity):
    """Persisted association of one external category with zero or one internal category.

    Rows are never deleted; unmapping clears ``internal_category_id``. The mapping kind
    and its confidence are stored privately and only change through ``link_auto``,
    ``link_manual`` and ``unlink`` so a confidence can only exist for auto links.
    """

    integration_source: IntegrationSource
    external_category_code: str
    external_category_id: str | None = None
    external_category_name: str | None = None
    external_parent_code: str | None = None
    internal_category_id: UUID | None = None
    is_active: bool = True
    auto_created: bool = False

    _mapping_kind: MappingKind = field(default=MappingKind.MANUAL, init=False)
    _confidence_score: float | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        # instrumented mappers replace the class-level defaults of init=False fields
        self._mapping_kind = MappingKind.MANUAL
        self._confidence_score = None

    @property
    def mapping_type(self) -> MappingType:
        if self._mapping_kind is MappingKind.AUTO:
            return AutoMapping(confidence=self._confidence_score or 0.0)
        return ManualMapping()

    @property
    def is_mapped(self) -> bool:
        return self.internal_category_id is not None

    @property
    def confidence_score(self) -> float | None:
        if not self.is_mapped:
            return None
        return self.mapping_type.confidence

    def link_auto(self, category_id: UUID, confidence: float) -> None:
        mapping = AutoMapping(confidence=confidence)
        self.internal_category_id = category_id
        self._mapping_kind = mapping.KIND
        self._confidence_score = mapping.confidence
        self.touch()

    def link_manual(self, category_id: UUID) -> None:
        self.internal_category_id = category_id
        self._mapping_kind = MappingKind.MANUAL
        self._confidence_score = None
        self.touch()

    def unlink(self) -> None:
        self.internal_category_id = None
        self._mapping_kind = MappingKind.MANUAL
        self._confidence_score = None
        self.touch()

    def describe(
        self,
        *,
        name: str | None,
        parent_code: str | None,
        external_id: str | None = None,
    ) -> bool:
        """Refresh structural metadata; return whether anything changed."""

        changed = False
        if name is not None and name != self.external_category_name:
            self.external_category_name = name
            changed = True
        if parent_code != self.external_parent_code:
            self.external_parent_code = parent_code
            changed = True
        if external_id is not None and external_id != self.external_category_id:
            self.external_category_id = external_id
            changed = True
        if changed:
            self.touch()
        return changed
