"""Ports for persisting cases and their history."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import date

    from caseflow.domain.model import AuditEntry, Case, Department

    from .change_feed import ChangeListener, Unsubscribe


@dataclass(frozen=True, slots=True, kw_only=True)
class CaseFilter:
    """Query filter. ``None`` on a field means "do not filter on it"."""

    archived: bool | None = False
    department: Department | None = None
    completed: bool | None = None
    any_tags: tuple[str, ...] = ()

    def matches_tags(self, tags: list[str]) -> bool:
        if not self.any_tags:
            return True
        return any(tag in tags for tag in self.any_tags)

    def matches(self, case: Case) -> bool:
        if self.archived is not None and case.archived != self.archived:
            return False
        if self.department is not None and case.department != self.department:
            return False
        if self.completed is not None and case.completed != self.completed:
            return False
        return self.matches_tags(case.tags)


@runtime_checkable
class CaseRepository(Protocol):
    """Persistence contract for cases inside a unit of work."""

    def add(self, entity: Case) -> None: ...

    def get(self, case_id: str) -> Case | None: ...

    def list(self, case_filter: CaseFilter) -> list[Case]: ...

    def remove(self, entity: Case) -> None: ...


@runtime_checkable
class AuditEntryRepository(Protocol):
    """Persistence contract for the append-only case history."""

    def add(self, entry: AuditEntry) -> None: ...

    def for_case(self, case_id: str) -> list[AuditEntry]: ...


@runtime_checkable
class CaseStore(Protocol):
    """Authoritative case holder used by the domain services.

    Every call is its own transaction. Failures raise
    :class:`~caseflow.domain.errors.PersistenceError`. Updates replace the given
    fields wholesale: there is no version check, so concurrent writers on one
    case resolve as last-write-wins.
    """

    def get(self, case_id: str) -> Case: ...

    def query(self, case_filter: CaseFilter | None = None) -> list[Case]: ...

    def add(self, case: Case) -> Case: ...

    def update(
        self,
        case_id: str,
        *,
        tags: list[str] | None = None,
        priority: bool | None = None,
        completed: bool | None = None,
        archived: bool | None = None,
        case_number: str | None = None,
        department: Department | None = None,
        due: date | None = None,
    ) -> Case: ...

    def delete(self, case_id: str) -> None: ...

    def subscribe(self, listener: ChangeListener) -> Unsubscribe: ...


@runtime_checkable
class AuditLog(Protocol):
    def record(self, case_id: str, text: str) -> AuditEntry: ...

    def history(self, case_id: str) -> list[AuditEntry]: ...
