"""Alembic environment: revisions run on the connection ``upgrade_head`` passes in."""

from __future__ import annotations

from alembic import context

from catalogsync.adapters.sqlalchemy.mappings import mapper_registry, start_mappers

start_mappers()

connection = context.config.attributes.get("connection")
if context.is_offline_mode() or connection is None:
    raise RuntimeError("Catalog migrations need a live connection; call upgrade_head(engine=...)")

context.configure(
    connection=connection,
    target_metadata=mapper_registry.metadata,
    # SQLite cannot ALTER constraints in place
    render_as_batch=True,
    compare_type=True,
)
with context.begin_transaction():
    context.run_migrations()
