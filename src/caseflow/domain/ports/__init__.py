"""Domain port definitions for adapters."""

from __future__ import annotations

from .change_feed import (
    ChangeBroadcaster,
    ChangeEvent,
    ChangeFeed,
    ChangeKind,
    ChangeListener,
    Unsubscribe,
)
from .persistence import (
    AuditEntryRepository,
    AuditLog,
    CaseFilter,
    CaseRepository,
    CaseStore,
)
from .stats import ProgressCallback, StatsEngine
from .unit_of_work import CaseRepositories, CaseUnitOfWork, RepositoryCollection, UnitOfWork

__all__ = [
    "AuditEntryRepository",
    "AuditLog",
    "CaseFilter",
    "CaseRepositories",
    "CaseRepository",
    "CaseStore",
    "CaseUnitOfWork",
    "ChangeBroadcaster",
    "ChangeEvent",
    "ChangeFeed",
    "ChangeKind",
    "ChangeListener",
    "ProgressCallback",
    "RepositoryCollection",
    "StatsEngine",
    "UnitOfWork",
    "Unsubscribe",
]
