"""Phase-based pipeline executed by the import orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from catalogsync.domain.catalog_import.context import ImportContext


class ImportPhase(Protocol):
    """Contract implemented by each import phase."""

    name: str

    def run(self, context: ImportContext) -> None: ...


@dataclass(slots=True)
class ImportPipeline:
    """Compose and execute the ordered import phases."""

    phases: Sequence[ImportPhase] = field(default_factory=tuple)

    def with_phase(self, phase: ImportPhase) -> ImportPipeline:
        """Return a new pipeline appending ``phase`` at the end."""

        return ImportPipeline(phases=(*self.phases, phase))

    def extend(self, phases: Iterable[ImportPhase]) -> ImportPipeline:
        return ImportPipeline(phases=(*self.phases, *tuple(phases)))

    @property
    def phase_names(self) -> list[str]:
        return [phase.name for phase in self.phases]

    def run(self, context: ImportContext) -> ImportContext:
        for phase in self.phases:
            phase.run(context)
        return context
