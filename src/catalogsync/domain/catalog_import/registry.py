"""Explicit registry of the adapters an import run may use."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from catalogsync.domain.errors import CatalogSyncError, UnsupportedIntegrationError
from catalogsync.domain.ports.fetching import ConnectionCheck

if TYPE_CHECKING:
    from catalogsync.domain.model import IntegrationSource
    from catalogsync.domain.ports.collaborators import (
        AttributeResolver,
        AttributeSetRegistry,
        ImageDownloader,
        StatisticsSink,
        StorageUploader,
    )
    from catalogsync.domain.ports.fetching import CatalogFetcher

type FetcherFactory = Callable[[], CatalogFetcher]


@dataclass(frozen=True, slots=True)
class IntegrationRegistry:
    """Built once by the application and handed to every orchestrator.

    Fetchers are created lazily so that only the configuration of the platform
    actually being imported from has to be present.
    """

    fetchers: Mapping[IntegrationSource, FetcherFactory] = field(default_factory=dict)
    statistics: StatisticsSink | None = None
    storage: StorageUploader | None = None
    images: ImageDownloader | None = None
    attributes: AttributeResolver | None = None
    attribute_sets: AttributeSetRegistry | None = None

    @property
    def sources(self) -> list[IntegrationSource]:
        return sorted(self.fetchers)

    def fetcher_for(self, source: IntegrationSource) -> CatalogFetcher:
        factory = self.fetchers.get(source)
        if factory is None:
            raise UnsupportedIntegrationError(f"No fetcher registered for {source}")
        return factory()

    def check_connection(self, source: IntegrationSource) -> ConnectionCheck:
        """Ask the source's fetcher to authenticate; platform errors become a failed check."""

        try:
            return self.fetcher_for(source).check_connection()
        except CatalogSyncError as exc:
            return ConnectionCheck(success=False, message=str(exc))

    def with_fetcher(
        self, source: IntegrationSource, factory: FetcherFactory
    ) -> IntegrationRegistry:
        return replace(self, fetchers={**self.fetchers, source: factory})
