"""Authenticated, paginated GET helpers shared by the platform adapters."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from catalogsync.domain.errors import (
    AuthenticationError,
    PlatformAPIError,
    TransientNetworkError,
)
from catalogsync.domain.ports.fetching import FetchProgress

if TYPE_CHECKING:
    from catalogsync.adapters.auth import RequestAuth
    from catalogsync.adapters.http_resilience import ResilientClient
    from catalogsync.domain.ports.fetching import PageCallback

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Page[TItem]:
    items: list[TItem]
    next_url: str | None = None


type PageParser[TItem] = Callable[[httpx.Response], Page[TItem]]


def raise_for_platform_status(response: httpx.Response, *, platform: str) -> None:
    status = response.status_code
    if status in {401, 403}:
        raise AuthenticationError(f"{platform} rejected the credentials (status {status})")
    if status == 429:
        raise TransientNetworkError(f"{platform} rate limit persisted after retry")
    if response.is_error:
        raise PlatformAPIError(
            f"{platform} request to {response.request.url} failed with status {status}",
            status_code=status,
        )


async def get_authorized(
    client: ResilientClient,
    url: str,
    *,
    platform: str,
    auth: RequestAuth,
    params: dict[str, str | int] | None = None,
) -> httpx.Response:
    request_auth = await auth.authorize(client)
    try:
        response = await client.get(url, params=params, auth=request_auth)
    except httpx.TransportError as exc:
        raise TransientNetworkError(f"{platform} request to {url} failed: {exc}") from exc
    raise_for_platform_status(response, platform=platform)
    return response


async def collect_pages[TItem](
    client: ResilientClient,
    url: str,
    *,
    platform: str,
    resource: str,
    auth: RequestAuth,
    parse_page: PageParser[TItem],
    params: dict[str, str | int] | None = None,
    on_page: PageCallback | None = None,
) -> list[TItem]:
    """Follow next-page links from ``url`` until exhausted, accumulating every item."""

    items: list[TItem] = []
    visited: set[str] = set()
    next_url: str | None = url
    next_params = params
    page_number = 0

    while next_url is not None:
        response = await get_authorized(
            client, next_url, platform=platform, auth=auth, params=next_params
        )
        visited.add(str(response.request.url))
        try:
            page = parse_page(response)
        except (ValueError, ValidationError) as exc:
            raise PlatformAPIError(f"Unexpected {platform} {resource} payload: {exc}") from exc

        items.extend(page.items)
        page_number += 1
        log.info("Fetched %s %s page %s (%s items)", platform, resource, page_number, len(items))
        if on_page is not None:
            on_page(FetchProgress(resource=resource, page=page_number, fetched=len(items)))

        next_url = page.next_url
        # next links already carry the query string
        next_params = None
        if next_url is not None and next_url in visited:
            log.warning("%s returned a repeated next link for %s; stopping", platform, resource)
            break

    return items
