"""Alembic environment for the case database.

``upgrade_head`` hands over an open connection through ``config.attributes``;
the URL path is only taken when Alembic is driven without one.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from alembic import context
from sqlalchemy import create_engine, pool

from caseflow.adapters.sqlalchemy.mappings import mapper_registry, start_mappers
from caseflow.config import get_database_config

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection

log = logging.getLogger("alembic.env")

start_mappers()

config = context.config
target_metadata = mapper_registry.metadata

# sqlite cannot ALTER most column properties in place
_OPTIONS = {"target_metadata": target_metadata, "render_as_batch": True, "compare_type": True}


def _migrate(connection: Connection) -> None:
    context.configure(connection=connection, **_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


def run_offline() -> None:
    url = config.get_main_option("sqlalchemy.url") or get_database_config().uri
    context.configure(url=url, literal_binds=True, **_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


def run_online() -> None:
    connection = config.attributes.get("connection")
    if connection is not None:
        _migrate(connection)
        return

    url = config.get_main_option("sqlalchemy.url") or get_database_config().uri
    log.info("Migrating case database")
    engine = create_engine(url, poolclass=pool.NullPool, future=True)
    try:
        with engine.connect() as own_connection:
            _migrate(own_connection)
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
