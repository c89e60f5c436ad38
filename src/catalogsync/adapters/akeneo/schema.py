"""Pydantic models describing Akeneo PIM REST payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AkeneoBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class AkeneoLink(AkeneoBaseModel):
    href: str


class AkeneoLinks(AkeneoBaseModel):
    next: AkeneoLink | None = None


class AkeneoCategory(AkeneoBaseModel):
    code: str
    parent: str | None = None
    labels: dict[str, str | None] = Field(default_factory=dict)


class AkeneoValue(AkeneoBaseModel):
    locale: str | None = None
    scope: str | None = None
    data: Any = None


class AkeneoProduct(AkeneoBaseModel):
    uuid: str | None = None
    identifier: str | None = None
    enabled: bool = True
    family: str | None = None
    categories: list[str] = Field(default_factory=list)
    values: dict[str, list[AkeneoValue]] = Field(default_factory=dict)


class AkeneoCategoryItems(AkeneoBaseModel):
    items: list[AkeneoCategory] = Field(default_factory=list)


class AkeneoProductItems(AkeneoBaseModel):
    items: list[AkeneoProduct] = Field(default_factory=list)


class AkeneoCategoryPage(AkeneoBaseModel):
    links: AkeneoLinks = Field(default_factory=AkeneoLinks, alias="_links")
    embedded: AkeneoCategoryItems = Field(default_factory=AkeneoCategoryItems, alias="_embedded")


class AkeneoProductPage(AkeneoBaseModel):
    links: AkeneoLinks = Field(default_factory=AkeneoLinks, alias="_links")
    embedded: AkeneoProductItems = Field(default_factory=AkeneoProductItems, alias="_embedded")
