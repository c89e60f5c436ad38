"""Attribute definitions and integration attribute sets persisted with SQLAlchemy."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy import select

from catalogsync.adapters.sqlalchemy.mappings import (
    attribute_definition_table,
    attribute_set_table,
)
from catalogsync.domain.model import AttributeDefinition, AttributeSet
from catalogsync.domain.ports import AttributeResolution
from catalogsync.domain.slugs import slugify

if TYPE_CHECKING:
    import uuid
    from collections.abc import Iterable, Mapping

    from sqlalchemy.orm import Session

    from catalogsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyStoreConnections
    from catalogsync.domain.model import IntegrationSource

log = getLogger(__name__)


def attribute_code(name: str) -> str:
    """``"Shoe Size"`` -> ``"shoe_size"``."""

    return slugify(name).replace("-", "_")


class SqlAlchemyAttributeResolver:
    """Normalises raw attribute names to codes, creating missing definitions.

    Runs in its own session so a failure never touches the caller's transaction.
    """

    def __init__(self, connections: SqlAlchemyStoreConnections) -> None:
        self.connections = connections

    def resolve(self, store_id: uuid.UUID, raw: Mapping[str, str]) -> AttributeResolution:
        attributes: dict[str, str] = {}
        created: list[uuid.UUID] = []
        with self.connections.session_factory() as session:
            known = self._definitions(session, store_id)
            for name, value in raw.items():
                code = attribute_code(name)
                if not code:
                    log.debug("Ignoring attribute without a usable name: %r", name)
                    continue
                if code not in known:
                    definition = AttributeDefinition(store_id=store_id, code=code, name=name)
                    session.add(definition)
                    known[code] = definition
                    created.append(definition.id)
                attributes[code] = value
            session.commit()
        if created:
            log.info("Created %d attribute definitions for store %s", len(created), store_id)
        return AttributeResolution(attributes=attributes, created_attribute_ids=tuple(created))

    @staticmethod
    def _definitions(session: Session, store_id: uuid.UUID) -> dict[str, AttributeDefinition]:
        stmt = select(AttributeDefinition).where(
            attribute_definition_table.c.store_id == store_id
        )
        return {definition.code: definition for definition in session.execute(stmt).scalars()}


class SqlAlchemyAttributeSetRegistry:
    def __init__(self, connections: SqlAlchemyStoreConnections) -> None:
        self.connections = connections

    def assign(
        self,
        store_id: uuid.UUID,
        source: IntegrationSource,
        attribute_ids: Iterable[uuid.UUID],
    ) -> None:
        with self.connections.session_factory() as session:
            stmt = (
                select(AttributeSet)
                .where(attribute_set_table.c.store_id == store_id)
                .where(attribute_set_table.c.integration_source == source)
            )
            attribute_set = session.execute(stmt).scalar_one_or_none()
            if attribute_set is None:
                attribute_set = AttributeSet(
                    store_id=store_id,
                    integration_source=source,
                    name=f"{source.value.title()} attributes",
                )
                session.add(attribute_set)
            added = attribute_set.include(attribute_ids)
            session.commit()
        log.info("Assigned %d new attributes to the %s attribute set", added, source)

