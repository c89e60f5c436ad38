"""Translate WooCommerce payloads into platform-neutral external records."""

from __future__ import annotations

from html import unescape
from typing import TYPE_CHECKING

from catalogsync.domain.model import (
    ExternalCategory,
    ExternalCategoryRef,
    ExternalImage,
    ExternalProduct,
    ProductStatus,
)

if TYPE_CHECKING:
    from .schema import WooAttribute, WooCategory, WooImage, WooProduct

# WooCommerce uses parent id 0 for top-level categories
ROOT_PARENT_ID = 0

_STATUS_MAP = {
    "publish": ProductStatus.ACTIVE,
    "pending": ProductStatus.PENDING,
}


def map_status(status: str) -> ProductStatus:
    return _STATUS_MAP.get(status, ProductStatus.DRAFT)


def _image(payload: WooImage | None) -> ExternalImage | None:
    if payload is None:
        return None
    return ExternalImage(url=payload.src, alt=payload.alt)


def _attributes(payloads: list[WooAttribute]) -> dict[str, str]:
    return {
        unescape(attribute.name): ", ".join(attribute.options)
        for attribute in payloads
        if attribute.options
    }


def translate_category(payload: WooCategory) -> ExternalCategory:
    code = str(payload.id)
    parent_code = None if payload.parent == ROOT_PARENT_ID else str(payload.parent)
    return ExternalCategory(
        external_id=code,
        code=code,
        name=unescape(payload.name),
        parent_code=parent_code,
        slug=payload.slug,
        description=payload.description,
        sort_order=payload.menu_order,
        image=_image(payload.image),
    )


def translate_product(payload: WooProduct) -> ExternalProduct:
    return ExternalProduct(
        external_id=str(payload.id),
        name=unescape(payload.name),
        slug=payload.slug,
        sku=payload.sku,
        status=map_status(payload.status),
        price=payload.price,
        description=payload.description,
        categories=tuple(
            ExternalCategoryRef(
                code=str(ref.id),
                external_id=str(ref.id),
                name=unescape(ref.name) if ref.name else None,
            )
            for ref in payload.categories
        ),
        raw_attributes=_attributes(payload.attributes),
        images=tuple(
            image for image in (_image(item) for item in payload.images) if image is not None
        ),
    )
