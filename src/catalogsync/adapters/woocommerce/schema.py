"""Pydantic models describing WooCommerce REST v3 payloads."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class WooBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class WooImage(WooBaseModel):
    id: int | None = None
    src: str
    alt: str | None = None

    _normalize_alt = field_validator("alt", mode="before")(_blank_to_none)


class WooCategory(WooBaseModel):
    id: int
    name: str
    slug: str | None = None
    parent: int = 0
    description: str | None = None
    menu_order: int = 0
    image: WooImage | None = None

    _normalize_text = field_validator("slug", "description", mode="before")(_blank_to_none)


class WooCategoryRef(WooBaseModel):
    id: int
    name: str | None = None
    slug: str | None = None


class WooAttribute(WooBaseModel):
    id: int = 0
    name: str
    options: list[str] = Field(default_factory=list)


class WooProduct(WooBaseModel):
    id: int
    name: str
    slug: str | None = None
    sku: str | None = None
    status: str = "draft"
    price: Decimal | None = None
    description: str | None = None
    categories: list[WooCategoryRef] = Field(default_factory=list)
    images: list[WooImage] = Field(default_factory=list)
    attributes: list[WooAttribute] = Field(default_factory=list)

    _normalize_text = field_validator("slug", "sku", "price", "description", mode="before")(
        _blank_to_none
    )


class WooEnvironment(WooBaseModel):
    version: str | None = None
    site_url: str | None = None


class WooSystemStatus(WooBaseModel):
    environment: WooEnvironment = Field(default_factory=WooEnvironment)


CATEGORY_LIST = TypeAdapter(list[WooCategory])
PRODUCT_LIST = TypeAdapter(list[WooProduct])
