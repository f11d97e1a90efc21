"""SQLAlchemy adapter package for caseflow."""

from __future__ import annotations

from .mappings import mapper_registry, start_mappers
from .repositories import SqlAlchemyAuditEntryRepository, SqlAlchemyCaseRepository
from .store import SqlAlchemyAuditLog, SqlAlchemyCaseStore
from .unit_of_work import (
    SqlAlchemyCaseUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyAuditEntryRepository",
    "SqlAlchemyAuditLog",
    "SqlAlchemyCaseRepository",
    "SqlAlchemyCaseStore",
    "SqlAlchemyCaseUnitOfWork",
    "StartupError",
    "configured_engine",
    "is_started",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
