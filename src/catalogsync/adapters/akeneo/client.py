"""Catalog fetcher for the Akeneo PIM REST API."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from datetime import UTC, timedelta
from logging import getLogger
from typing import TYPE_CHECKING, Any

from catalogsync.adapters.auth import OAuthPasswordGrant
from catalogsync.adapters.catalog_http import Page, collect_pages, get_authorized
from catalogsync.adapters.http_resilience import ClientFactory, default_client_factory
from catalogsync.config.akeneo import AkeneoConfig, get_akeneo_config
from catalogsync.domain.errors import AuthenticationError, PlatformAPIError
from catalogsync.domain.model import IntegrationSource
from catalogsync.domain.ports.fetching import CatalogFetcher, ConnectionCheck

from .schema import AkeneoCategoryPage, AkeneoProductPage
from .translator import translate_category, translate_product

if TYPE_CHECKING:
    import httpx

    from catalogsync.adapters.catalog_http import PageParser
    from catalogsync.adapters.http_resilience import ResilientClient
    from catalogsync.domain.model import ExternalCategory, ExternalProduct
    from catalogsync.domain.ports.fetching import PageCallback, ProductQuery

log = getLogger(__name__)

PLATFORM = "Akeneo"
TOKEN_PATH = "/api/oauth/v1/token"
CATEGORIES_PATH = "/api/rest/v1/categories"
PRODUCTS_UUID_PATH = "/api/rest/v1/products-uuid"
PRODUCTS_PATH = "/api/rest/v1/products"
DEFAULT_PAGE_SIZE = 100
# Akeneo compares "updated" against server time in this format
UPDATED_FORMAT = "%Y-%m-%d %H:%M:%S"


def product_search(query: ProductQuery) -> dict[str, list[dict[str, Any]]]:
    """Build the ``search`` filter document for a product listing."""

    search: dict[str, list[dict[str, Any]]] = {}
    if query.updated_after is not None:
        updated_after = query.updated_after.astimezone(UTC).strftime(UPDATED_FORMAT)
        search["updated"] = [{"operator": ">", "value": updated_after}]
    if query.families:
        search["family"] = [{"operator": "IN", "value": list(query.families)}]
    if query.min_completeness is not None:
        search["completeness"] = [
            {"operator": ">=", "value": query.min_completeness, "scope": query.channel}
        ]
    return search


@dataclass(slots=True)
class AkeneoFetcher:
    """Fetch categories and products; the OAuth token outlives individual calls."""

    config: AkeneoConfig = field(default_factory=get_akeneo_config)
    client_factory: ClientFactory = field(default=default_client_factory)
    page_size: int = DEFAULT_PAGE_SIZE
    use_product_uuid: bool = True
    auth: OAuthPasswordGrant = field(init=False)

    def __post_init__(self) -> None:
        self.auth = OAuthPasswordGrant(
            token_url=f"{self.config.base_url}{TOKEN_PATH}",
            client_id=self.config.client_id,
            client_secret=self.config.client_secret,
            username=self.config.username,
            password=self.config.password,
            refresh_skew=timedelta(seconds=self.config.token_refresh_skew_seconds),
        )

    @property
    def source(self) -> IntegrationSource:
        return IntegrationSource.AKENEO

    @property
    def products_path(self) -> str:
        return PRODUCTS_UUID_PATH if self.use_product_uuid else PRODUCTS_PATH

    def fetch_categories(self, *, on_page: PageCallback | None = None) -> list[ExternalCategory]:
        return asyncio.run(
            self._collect(
                CATEGORIES_PATH,
                "categories",
                self._parse_category_page,
                on_page,
                params={"limit": self.page_size},
            )
        )

    def fetch_products(
        self,
        *,
        on_page: PageCallback | None = None,
        query: ProductQuery | None = None,
    ) -> list[ExternalProduct]:
        params: dict[str, str | int] = {"limit": self.page_size}
        if query is not None:
            search = product_search(query)
            if search:
                params["search"] = json.dumps(search, separators=(",", ":"))
            if query.channel is not None:
                params["scope"] = query.channel
        return asyncio.run(
            self._collect(
                self.products_path, "products", self._parse_product_page, on_page, params=params
            )
        )

    def check_connection(self) -> ConnectionCheck:
        return asyncio.run(self._check_connection())

    async def _check_connection(self) -> ConnectionCheck:
        async with self.client_factory(self.config.resilience) as client:
            # authentication or category failures propagate: nothing usable is reachable
            await self._read_sample(client, CATEGORIES_PATH)
            try:
                await self._read_sample(client, self.products_path)
            except (AuthenticationError, PlatformAPIError) as exc:
                log.warning("Akeneo products endpoint %s unavailable: %s", self.products_path, exc)
                return ConnectionCheck(
                    success=True,
                    message=f"Connected to Akeneo (categories only; products failed: {exc})",
                )
        return ConnectionCheck(
            success=True, message=f"Connected to Akeneo at {self.config.base_url}"
        )

    async def _read_sample(self, client: ResilientClient, path: str) -> None:
        await get_authorized(
            client,
            f"{self.config.base_url}{path}",
            platform=PLATFORM,
            auth=self.auth,
            params={"limit": 1},
        )

    def _parse_category_page(self, response: httpx.Response) -> Page[ExternalCategory]:
        page = AkeneoCategoryPage.model_validate(response.json())
        return Page(
            items=[
                translate_category(item, locale=self.config.locale)
                for item in page.embedded.items
            ],
            next_url=page.links.next.href if page.links.next else None,
        )

    def _parse_product_page(self, response: httpx.Response) -> Page[ExternalProduct]:
        page = AkeneoProductPage.model_validate(response.json())
        return Page(
            items=[
                translate_product(item, locale=self.config.locale)
                for item in page.embedded.items
                if item.uuid or item.identifier
            ],
            next_url=page.links.next.href if page.links.next else None,
        )

    async def _collect[TItem](
        self,
        path: str,
        resource: str,
        parse_page: PageParser[TItem],
        on_page: PageCallback | None,
        *,
        params: dict[str, str | int],
    ) -> list[TItem]:
        async with self.client_factory(self.config.resilience) as client:
            return await collect_pages(
                client,
                f"{self.config.base_url}{path}",
                platform=PLATFORM,
                resource=resource,
                auth=self.auth,
                parse_page=parse_page,
                params=params,
                on_page=on_page,
            )


if TYPE_CHECKING:
    _fetcher_check: CatalogFetcher = AkeneoFetcher()
