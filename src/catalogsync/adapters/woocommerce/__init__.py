"""Public interface for the WooCommerce adapter."""

from __future__ import annotations

from .client import (
    WooCommerceFetcher,
    parse_category_page,
    parse_product_page,
    product_params,
)
from .schema import WooCategory, WooProduct
from .translator import map_status, translate_category, translate_product

__all__ = [
    "WooCategory",
    "WooCommerceFetcher",
    "WooProduct",
    "map_status",
    "parse_category_page",
    "parse_product_page",
    "product_params",
    "translate_category",
    "translate_product",
]
