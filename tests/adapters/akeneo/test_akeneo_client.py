from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import httpx
import pytest

from catalogsync.adapters.akeneo import (
    AkeneoCategory,
    AkeneoFetcher,
    AkeneoProduct,
    category_label,
    format_value,
    product_search,
    translate_category,
    translate_product,
)
from catalogsync.config import AkeneoConfig
from catalogsync.domain.errors import AuthenticationError, PlatformAPIError
from catalogsync.domain.model import IntegrationSource, ProductStatus
from catalogsync.domain.ports import ProductQuery
from tests.helpers.http import RecordingTransport, fast_resilience

BASE_URL = "https://pim.example"


def _config(locale: str = "en_US") -> AkeneoConfig:
    return AkeneoConfig(
        base_url=BASE_URL,
        client_id="client",
        client_secret="secret",
        username="importer",
        password="hunter2",
        resilience=fast_resilience("akeneo"),
        locale=locale,
    )


def _page(items: list[dict[str, object]], next_href: str | None = None) -> dict[str, object]:
    links: dict[str, object] = {"self": {"href": "ignored"}}
    if next_href is not None:
        links["next"] = {"href": next_href}
    return {"_links": links, "_embedded": {"items": items}}


def _token_response() -> httpx.Response:
    return httpx.Response(
        200, json={"access_token": "token-1", "expires_in": 3600, "refresh_token": "r1"}
    )


def test_category_label_prefers_configured_locale() -> None:
    category = AkeneoCategory.model_validate(
        {"code": "shoes", "labels": {"en_US": "Shoes", "de_DE": "Schuhe"}}
    )

    assert category_label(category, locale="de_DE") == "Schuhe"
    assert category_label(category, locale="fr_FR") == "Shoes"


def test_category_label_falls_back_to_code() -> None:
    category = AkeneoCategory.model_validate({"code": "misc", "labels": {"en_US": None}})

    assert category_label(category, locale="en_US") == "misc"


def test_translate_category_uses_code_as_identity() -> None:
    category = translate_category(
        AkeneoCategory.model_validate(
            {"code": "winter_boots", "parent": "boots", "labels": {"en_US": "Winter Boots"}}
        ),
        locale="en_US",
    )

    assert (category.external_id, category.code) == ("winter_boots", "winter_boots")
    assert category.parent_code == "boots"
    assert category.slug == "winter-boots"
    assert category.name == "Winter Boots"


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        (None, None),
        (True, "true"),
        ("  ", None),
        (["red", "blue"], "red, blue"),
        ({"amount": "12", "unit": "KILOGRAM"}, "12 KILOGRAM"),
        ([{"amount": "49.90", "currency": "EUR"}], "49.90 EUR"),
    ],
)
def test_format_value(data: object, expected: str | None) -> None:
    assert format_value(data) == expected


def test_translate_product_picks_locale_values() -> None:
    payload = AkeneoProduct.model_validate(
        {
            "uuid": "8a3d7c0e-0000-4000-8000-000000000001",
            "identifier": "BOOT-1",
            "enabled": False,
            "categories": ["boots"],
            "values": {
                "name": [
                    {"locale": "de_DE", "scope": None, "data": "Stiefel"},
                    {"locale": "en_US", "scope": None, "data": "Boot"},
                ],
                "color": [{"locale": None, "scope": None, "data": "red"}],
                "price": [{"data": [{"amount": "49.90", "currency": "EUR"}]}],
            },
        }
    )

    product = translate_product(payload, locale="en_US")

    assert product.external_id == "8a3d7c0e-0000-4000-8000-000000000001"
    assert product.sku == "BOOT-1"
    assert product.name == "Boot"
    assert product.status is ProductStatus.DRAFT
    assert product.price == Decimal("49.90")
    assert product.category_codes == ["boots"]
    assert product.raw_attributes["color"] == "red"
    assert "name" not in product.raw_attributes


def test_translate_product_without_identity_is_rejected() -> None:
    with pytest.raises(ValueError, match="neither uuid nor identifier"):
        translate_product(AkeneoProduct.model_validate({"enabled": True}), locale="en_US")


def test_fetcher_authenticates_once_and_follows_next_links() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/oauth/v1/token":
            return _token_response()
        assert request.headers["Authorization"] == "Bearer token-1"
        if request.url.path == "/api/rest/v1/categories":
            if request.url.params.get("page") == "2":
                return httpx.Response(200, json=_page([{"code": "boots", "parent": "master"}]))
            return httpx.Response(
                200,
                json=_page(
                    [{"code": "master", "labels": {"en_US": "Master"}}],
                    next_href=f"{BASE_URL}/api/rest/v1/categories?page=2&limit=1",
                ),
            )
        return httpx.Response(
            200, json=_page([{"identifier": "BOOT-1"}, {"enabled": True}])
        )

    transport = RecordingTransport(handler)
    fetcher = AkeneoFetcher(
        config=_config(), client_factory=transport.client_factory, page_size=1
    )

    categories = fetcher.fetch_categories()
    products = fetcher.fetch_products()

    assert fetcher.source is IntegrationSource.AKENEO
    assert [(c.code, c.parent_code) for c in categories] == [("master", None), ("boots", "master")]
    # items without any identity are dropped
    assert [product.external_id for product in products] == ["BOOT-1"]
    assert transport.paths().count("/api/oauth/v1/token") == 1
    assert transport.paths()[-1] == "/api/rest/v1/products-uuid"


def test_fetcher_legacy_products_endpoint() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/oauth/v1/token":
            return _token_response()
        return httpx.Response(200, json=_page([]))

    transport = RecordingTransport(handler)
    fetcher = AkeneoFetcher(
        config=_config(), client_factory=transport.client_factory, use_product_uuid=False
    )

    assert fetcher.fetch_products() == []
    assert transport.paths()[-1] == "/api/rest/v1/products"


def test_fetcher_malformed_page_is_platform_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/oauth/v1/token":
            return _token_response()
        return httpx.Response(200, json={"_embedded": {"items": [{"labels": {}}]}})

    fetcher = AkeneoFetcher(
        config=_config(), client_factory=RecordingTransport(handler).client_factory
    )

    with pytest.raises(PlatformAPIError):
        fetcher.fetch_categories()


def test_product_search_translates_query() -> None:
    query = ProductQuery(
        updated_after=datetime(2026, 3, 1, 14, 30, tzinfo=timezone(timedelta(hours=2))),
        families=("boots", "shoes"),
        channel="ecommerce",
        min_completeness=80,
    )

    assert product_search(query) == {
        "updated": [{"operator": ">", "value": "2026-03-01 12:30:00"}],
        "family": [{"operator": "IN", "value": ["boots", "shoes"]}],
        "completeness": [{"operator": ">=", "value": 80, "scope": "ecommerce"}],
    }
    assert product_search(ProductQuery()) == {}


def test_fetcher_sends_search_and_scope() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/oauth/v1/token":
            return _token_response()
        return httpx.Response(200, json=_page([{"identifier": "BOOT-1", "family": "boots"}]))

    transport = RecordingTransport(handler)
    fetcher = AkeneoFetcher(config=_config(), client_factory=transport.client_factory)

    products = fetcher.fetch_products(
        query=ProductQuery(families=("boots",), channel="mobile")
    )

    assert [product.family for product in products] == ["boots"]
    params = transport.requests[-1].url.params
    assert params["scope"] == "mobile"
    assert json.loads(params["search"]) == {"family": [{"operator": "IN", "value": ["boots"]}]}


def test_check_connection_reads_categories_and_products() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/oauth/v1/token":
            return _token_response()
        return httpx.Response(200, json=_page([]))

    transport = RecordingTransport(handler)
    fetcher = AkeneoFetcher(config=_config(), client_factory=transport.client_factory)

    check = fetcher.check_connection()

    assert check.success
    assert check.message == f"Connected to Akeneo at {BASE_URL}"
    assert transport.paths() == [
        "/api/oauth/v1/token",
        "/api/rest/v1/categories",
        "/api/rest/v1/products-uuid",
    ]


def test_check_connection_tolerates_unreadable_products() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/oauth/v1/token":
            return _token_response()
        if request.url.path == "/api/rest/v1/categories":
            return httpx.Response(200, json=_page([]))
        return httpx.Response(403)

    fetcher = AkeneoFetcher(
        config=_config(), client_factory=RecordingTransport(handler).client_factory
    )

    check = fetcher.check_connection()

    assert check.success
    assert check.message.startswith("Connected to Akeneo (categories only")


def test_check_connection_rejected_token_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "invalid credentials"})

    fetcher = AkeneoFetcher(
        config=_config(), client_factory=RecordingTransport(handler).client_factory
    )

    with pytest.raises(AuthenticationError):
        fetcher.check_connection()
