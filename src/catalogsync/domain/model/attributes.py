"""Attribute definitions and integration attribute sets owned by a store."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from uuid import UUID  # noqa: TC003

from catalogsync.domain.model.base import StoreScopedEntity
from catalogsync.domain.model.enums import IntegrationSource


@dataclass(eq=False, kw_only=True)
class AttributeDefinition(StoreScopedEntity):
    code: str
    name: str


@dataclass(eq=False, kw_only=True)
class AttributeSet(StoreScopedEntity):
    """Attributes first seen while importing from one integration."""

    integration_source: IntegrationSource
    name: str
    attribute_ids: list[UUID] = field(default_factory=list)

    def include(self, attribute_ids: Iterable[UUID]) -> int:
        """Add unseen ids; return how many were new."""

        merged = list(dict.fromkeys([*self.attribute_ids, *attribute_ids]))
        added = len(merged) - len(self.attribute_ids)
        if added:
            self.attribute_ids = merged
            self.touch()
        return added
