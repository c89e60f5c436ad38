"""Import statistics sink writing audit rows."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.domain.model import ImportAuditRecord

if TYPE_CHECKING:
    import uuid

    from catalogsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyStoreConnections
    from catalogsync.domain.model import ImportMethod, ImportRunStatistics, IntegrationSource

log = getLogger(__name__)


class SqlAlchemyStatisticsSink:
    def __init__(self, connections: SqlAlchemyStoreConnections) -> None:
        self.connections = connections

    def record(
        self,
        store_id: uuid.UUID,
        stats: ImportRunStatistics,
        *,
        source: IntegrationSource,
        method: ImportMethod,
        processing_seconds: float | None = None,
    ) -> None:
        record = ImportAuditRecord(
            store_id=store_id,
            entity_type=stats.entity_type,
            source=source,
            method=method,
            total=stats.total,
            imported=stats.imported,
            skipped=stats.skipped,
            failed=stats.failed,
            error_details=[failure.as_dict() for failure in stats.errors],
            processing_seconds=processing_seconds,
        )
        with self.connections.session_factory() as session:
            session.add(record)
            session.commit()
        log.debug("Recorded %s import statistics for store %s", stats.entity_type, store_id)
