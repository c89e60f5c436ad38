"""Slug derivation shared by the resolver and the upsert engine."""

from __future__ import annotations

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(value: str | None) -> str:
    """Lowercase ``value`` and collapse every non-alphanumeric run into one ``-``."""

    if not value:
        return ""
    return _NON_ALNUM.sub("-", value.lower()).strip("-")
