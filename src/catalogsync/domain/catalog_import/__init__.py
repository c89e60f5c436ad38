"""Import orchestration: registry, settings, phases and the orchestrator."""

from __future__ import annotations

from .context import ImportContext
from .filters import ImportFilters, subtree_codes
from .orchestrator import FullImportResult, ImportOrchestrator, ImportRunResult
from .pipeline import ImportPhase, ImportPipeline
from .progress import ImportProgress, ImportStage, ProgressCallback, ProgressReporter
from .registry import FetcherFactory, IntegrationRegistry
from .settings import ImportSettings

__all__ = [
    "FetcherFactory",
    "FullImportResult",
    "ImportContext",
    "ImportFilters",
    "ImportOrchestrator",
    "ImportPhase",
    "ImportPipeline",
    "ImportProgress",
    "ImportRunResult",
    "ImportSettings",
    "ImportStage",
    "IntegrationRegistry",
    "ProgressCallback",
    "ProgressReporter",
    "subtree_codes",
]
