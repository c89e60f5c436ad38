"""Ports for fetching catalog data from external platforms."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime

    from catalogsync.domain.model import (
        ExternalCategory,
        ExternalProduct,
        IntegrationSource,
    )


@dataclass(frozen=True, slots=True)
class FetchProgress:
    """Reported after each page an adapter retrieves."""

    resource: str
    page: int
    fetched: int


type PageCallback = Callable[[FetchProgress], None]


@dataclass(frozen=True, slots=True, kw_only=True)
class ProductQuery:
    """Narrowing a platform may apply while listing products.

    Adapters translate what their API understands and ignore the rest, so callers
    still check the returned products.
    """

    updated_after: datetime | None = None
    families: tuple[str, ...] = ()
    channel: str | None = None
    min_completeness: int | None = None

    @property
    def is_empty(self) -> bool:
        return (
            self.updated_after is None
            and not self.families
            and self.channel is None
            and self.min_completeness is None
        )


@dataclass(frozen=True, slots=True)
class ConnectionCheck:
    success: bool
    message: str


@runtime_checkable
class CatalogFetcher(Protocol):
    """Paginated, authenticated retrieval of one platform's catalog.

    Each call walks every page and returns one flat, ordered sequence.
    """

    @property
    def source(self) -> IntegrationSource: ...

    def fetch_categories(self, *, on_page: PageCallback | None = None) -> list[ExternalCategory]:
        ...

    def fetch_products(
        self,
        *,
        on_page: PageCallback | None = None,
        query: ProductQuery | None = None,
    ) -> list[ExternalProduct]: ...

    def check_connection(self) -> ConnectionCheck:
        """Authenticate and read one page; raise the usual adapter errors on failure."""
        ...


__all__ = ["CatalogFetcher", "ConnectionCheck", "FetchProgress", "PageCallback", "ProductQuery"]
