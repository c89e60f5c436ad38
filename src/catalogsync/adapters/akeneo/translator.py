"""Translate Akeneo payloads into platform-neutral external records."""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from logging import getLogger
from typing import TYPE_CHECKING, Any

from catalogsync.domain.model import (
    ExternalCategory,
    ExternalCategoryRef,
    ExternalProduct,
    ProductStatus,
)
from catalogsync.domain.slugs import slugify

if TYPE_CHECKING:
    from .schema import AkeneoCategory, AkeneoProduct, AkeneoValue

log = getLogger(__name__)

NAME_ATTRIBUTE = "name"
DESCRIPTION_ATTRIBUTE = "description"
PRICE_ATTRIBUTE = "price"
_RESERVED_ATTRIBUTES = frozenset({NAME_ATTRIBUTE, DESCRIPTION_ATTRIBUTE})


def category_label(payload: AkeneoCategory, *, locale: str) -> str:
    labels = {key: value for key, value in payload.labels.items() if value}
    return labels.get(locale) or next(iter(labels.values()), None) or payload.code


def _pick_value(values: list[AkeneoValue], *, locale: str) -> AkeneoValue | None:
    for value in values:
        if value.locale == locale:
            return value
    for value in values:
        if value.locale is None:
            return value
    return values[0] if values else None


def format_value(data: Any) -> str | None:
    """Flatten an Akeneo value's ``data`` into a display string."""

    if data is None:
        return None
    if isinstance(data, bool):
        return "true" if data else "false"
    if isinstance(data, Mapping):
        if "amount" in data:
            unit = data.get("unit") or data.get("currency")
            return f"{data['amount']} {unit}" if unit else str(data["amount"])
        return ", ".join(f"{key}: {item}" for key, item in data.items())
    if isinstance(data, list):
        parts = [format_value(item) for item in data]
        return ", ".join(part for part in parts if part)
    text = str(data).strip()
    return text or None


def _price(values: list[AkeneoValue] | None) -> Decimal | None:
    if not values:
        return None
    data = values[0].data
    if isinstance(data, list) and data and isinstance(data[0], Mapping):
        data = data[0].get("amount")
    if data is None:
        return None
    try:
        return Decimal(str(data))
    except InvalidOperation:
        log.warning("Ignoring unparseable Akeneo price %r", data)
        return None


def translate_category(payload: AkeneoCategory, *, locale: str) -> ExternalCategory:
    return ExternalCategory(
        external_id=payload.code,
        code=payload.code,
        name=category_label(payload, locale=locale),
        parent_code=payload.parent or None,
        # codes are unique per catalog, labels are not
        slug=slugify(payload.code),
    )


def translate_product(payload: AkeneoProduct, *, locale: str) -> ExternalProduct:
    external_id = payload.uuid or payload.identifier
    if external_id is None:
        raise ValueError("Akeneo product has neither uuid nor identifier")

    attributes: dict[str, str] = {}
    for attribute, values in payload.values.items():
        if attribute in _RESERVED_ATTRIBUTES:
            continue
        picked = _pick_value(values, locale=locale)
        text = format_value(picked.data) if picked is not None else None
        if text is not None:
            attributes[attribute] = text

    name_value = _pick_value(payload.values.get(NAME_ATTRIBUTE, []), locale=locale)
    description_value = _pick_value(payload.values.get(DESCRIPTION_ATTRIBUTE, []), locale=locale)
    name = (format_value(name_value.data) if name_value else None) or payload.identifier
    return ExternalProduct(
        external_id=external_id,
        name=name or external_id,
        sku=payload.identifier,
        status=ProductStatus.ACTIVE if payload.enabled else ProductStatus.DRAFT,
        price=_price(payload.values.get(PRICE_ATTRIBUTE)),
        description=format_value(description_value.data) if description_value else None,
        family=payload.family,
        categories=tuple(
            ExternalCategoryRef(code=code, external_id=code) for code in payload.categories
        ),
        raw_attributes=attributes,
    )
