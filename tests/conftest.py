from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002

from caseflow.adapters.sqlalchemy import start_mappers
from caseflow.adapters.sqlalchemy.migrations import upgrade_head
from caseflow.adapters.sqlalchemy.unit_of_work import SqlAlchemyCaseUnitOfWork, shutdown, startup

# keeps build_workflow() and the Alembic env off the user's data directory
os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    """Migrated in-memory case database."""

    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    start_mappers()
    upgrade_head(engine=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyCaseUnitOfWork]]:
    """Start the adapter on ``sqlite_engine`` and yield the unit-of-work class."""

    startup(engine=sqlite_engine, force=True)
    yield SqlAlchemyCaseUnitOfWork
    shutdown()
