"""Per-run import statistics and their persisted audit form."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003

from catalogsync.domain.model.base import StoreScopedEntity, utcnow
from catalogsync.domain.model.enums import (
    FailureKind,
    ImportEntity,
    ImportMethod,
    IntegrationSource,
)


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportFailure:
    kind: FailureKind
    external_id: str | None
    name: str | None
    message: str

    def as_dict(self) -> dict[str, str | None]:
        return {
            "type": self.kind.value,
            "external_id": self.external_id,
            "name": self.name,
            "message": self.message,
        }


@dataclass(slots=True, kw_only=True)
class ImportRunStatistics:
    """Counters for one orchestrator run.

    ``failed`` counts items whose upsert did not complete. Side-effect failures land in
    ``errors`` without touching any counter.
    """

    entity_type: ImportEntity
    total: int = 0
    imported: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[ImportFailure] = field(default_factory=list[ImportFailure])

    def record_imported(self) -> None:
        self.imported += 1

    def record_skipped(self) -> None:
        self.skipped += 1

    def record_failure(self, failure: ImportFailure) -> None:
        if not failure.kind.is_side_effect:
            self.failed += 1
        self.errors.append(failure)

    @property
    def processed(self) -> int:
        return self.imported + self.skipped + self.failed


@dataclass(eq=False, kw_only=True)
class ImportAuditRecord(StoreScopedEntity):
    entity_type: ImportEntity
    source: IntegrationSource
    method: ImportMethod
    total: int
    imported: int
    skipped: int
    failed: int
    error_details: list[dict[str, str | None]] = field(default_factory=list)
    processing_seconds: float | None = None
    imported_at: datetime = field(default_factory=utcnow)
