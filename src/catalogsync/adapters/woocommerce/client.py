"""Catalog fetcher for the WooCommerce REST API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from catalogsync.adapters.auth import BasicCredentials
from catalogsync.adapters.catalog_http import Page, collect_pages, get_authorized
from catalogsync.adapters.http_resilience import ClientFactory, default_client_factory
from catalogsync.config.woocommerce import WooCommerceConfig, get_woocommerce_config
from catalogsync.domain.errors import AuthenticationError, PlatformAPIError
from catalogsync.domain.model import IntegrationSource
from catalogsync.domain.ports.fetching import CatalogFetcher, ConnectionCheck

from .schema import CATEGORY_LIST, PRODUCT_LIST, WooSystemStatus
from .translator import translate_category, translate_product

if TYPE_CHECKING:
    import httpx

    from catalogsync.adapters.catalog_http import PageParser
    from catalogsync.adapters.http_resilience import ResilientClient
    from catalogsync.domain.model import ExternalCategory, ExternalProduct
    from catalogsync.domain.ports.fetching import PageCallback, ProductQuery

log = getLogger(__name__)

PLATFORM = "WooCommerce"
CATEGORIES_PATH = "/products/categories"
PRODUCTS_PATH = "/products"
SYSTEM_STATUS_PATH = "/system_status"
DEFAULT_PAGE_SIZE = 100


def _next_link(response: httpx.Response) -> str | None:
    return response.links.get("next", {}).get("url")


def parse_category_page(response: httpx.Response) -> Page[ExternalCategory]:
    payloads = CATEGORY_LIST.validate_python(response.json())
    return Page(
        items=[translate_category(payload) for payload in payloads],
        next_url=_next_link(response),
    )


def parse_product_page(response: httpx.Response) -> Page[ExternalProduct]:
    payloads = PRODUCT_LIST.validate_python(response.json())
    return Page(
        items=[translate_product(payload) for payload in payloads],
        next_url=_next_link(response),
    )


def product_params(query: ProductQuery | None, *, page_size: int) -> dict[str, str | int]:
    params: dict[str, str | int] = {"per_page": page_size}
    if query is None:
        return params
    if query.updated_after is not None:
        params["modified_after"] = query.updated_after.astimezone(UTC).strftime(
            "%Y-%m-%dT%H:%M:%S"
        )
        params["dates_are_gmt"] = "true"
    if query.families or query.channel or query.min_completeness is not None:
        log.debug("WooCommerce has no family, channel or completeness filter; ignoring them")
    return params


@dataclass(slots=True)
class WooCommerceFetcher:
    config: WooCommerceConfig = field(default_factory=get_woocommerce_config)
    client_factory: ClientFactory = field(default=default_client_factory)
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def source(self) -> IntegrationSource:
        return IntegrationSource.WOOCOMMERCE

    @property
    def auth(self) -> BasicCredentials:
        return BasicCredentials(self.config.consumer_key, self.config.consumer_secret)

    def fetch_categories(self, *, on_page: PageCallback | None = None) -> list[ExternalCategory]:
        return asyncio.run(
            self._collect(
                CATEGORIES_PATH,
                "categories",
                parse_category_page,
                on_page,
                params={"per_page": self.page_size},
            )
        )

    def fetch_products(
        self,
        *,
        on_page: PageCallback | None = None,
        query: ProductQuery | None = None,
    ) -> list[ExternalProduct]:
        return asyncio.run(
            self._collect(
                PRODUCTS_PATH,
                "products",
                parse_product_page,
                on_page,
                params=product_params(query, page_size=self.page_size),
            )
        )

    def check_connection(self) -> ConnectionCheck:
        return asyncio.run(self._check_connection())

    async def _check_connection(self) -> ConnectionCheck:
        async with self.client_factory(self.config.resilience) as client:
            try:
                status = await self._system_status(client)
            except (AuthenticationError, PlatformAPIError) as exc:
                # system status needs an administrator key; read access is enough for imports
                log.info("WooCommerce system status unavailable (%s); trying products", exc)
                await self._get(client, PRODUCTS_PATH, params={"per_page": 1})
                return ConnectionCheck(
                    success=True, message="Connected to WooCommerce (products readable)"
                )
        version = status.environment.version
        suffix = f" {version}" if version else ""
        return ConnectionCheck(success=True, message=f"Connected to WooCommerce{suffix}")

    async def _system_status(self, client: ResilientClient) -> WooSystemStatus:
        response = await self._get(client, SYSTEM_STATUS_PATH)
        try:
            return WooSystemStatus.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise PlatformAPIError(f"Unexpected {PLATFORM} system status payload: {exc}") from exc

    async def _get(
        self,
        client: ResilientClient,
        path: str,
        *,
        params: dict[str, str | int] | None = None,
    ) -> httpx.Response:
        return await get_authorized(
            client,
            f"{self.config.api_url}{path}",
            platform=PLATFORM,
            auth=self.auth,
            params=params,
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
                f"{self.config.api_url}{path}",
                platform=PLATFORM,
                resource=resource,
                auth=self.auth,
                parse_page=parse_page,
                params=params,
                on_page=on_page,
            )


if TYPE_CHECKING:
    _fetcher_check: CatalogFetcher = WooCommerceFetcher()
