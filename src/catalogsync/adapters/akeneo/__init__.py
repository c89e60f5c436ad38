"""Public interface for the Akeneo PIM adapter."""

from __future__ import annotations

from .client import AkeneoFetcher, product_search
from .schema import AkeneoCategory, AkeneoCategoryPage, AkeneoProduct, AkeneoProductPage
from .translator import category_label, format_value, translate_category, translate_product

__all__ = [
    "AkeneoCategory",
    "AkeneoCategoryPage",
    "AkeneoFetcher",
    "AkeneoProduct",
    "AkeneoProductPage",
    "category_label",
    "format_value",
    "product_search",
    "translate_category",
    "translate_product",
]
