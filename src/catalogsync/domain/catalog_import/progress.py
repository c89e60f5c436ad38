"""Observability-only progress reporting for import runs."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from catalogsync.domain.ports.fetching import FetchProgress

log = getLogger(__name__)


class ImportStage(StrEnum):
    FETCH = "fetch"
    MAP = "map"
    UPSERT = "upsert"


@dataclass(frozen=True, slots=True)
class ImportProgress:
    stage: ImportStage
    current: int
    total: int | None = None
    label: str | None = None


type ProgressCallback = Callable[[ImportProgress], None]


class ProgressReporter:
    """Forward progress to an optional callback; callback errors are logged and dropped."""

    def __init__(self, callback: ProgressCallback | None = None) -> None:
        self._callback = callback

    def report(self, progress: ImportProgress) -> None:
        if self._callback is None:
            return
        try:
            self._callback(progress)
        except Exception:  # noqa: BLE001
            log.warning("Progress callback failed at %s", progress, exc_info=True)

    def on_page(self, page: FetchProgress) -> None:
        self.report(
            ImportProgress(
                stage=ImportStage.FETCH,
                current=page.fetched,
                label=f"{page.resource} page {page.page}",
            )
        )
