"""Case store and audit log on top of the SQLAlchemy unit of work.

Each call runs in its own unit of work. Change events are published after the
commit, so subscribers only ever see committed rows.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from caseflow.adapters.sqlalchemy.unit_of_work import SqlAlchemyCaseUnitOfWork
from caseflow.domain.errors import CaseNotFoundError, PersistenceError
from caseflow.domain.model import AuditEntry
from caseflow.domain.ports import CaseFilter, ChangeBroadcaster, ChangeEvent, ChangeKind

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import date

    from caseflow.domain.model import Case, Department
    from caseflow.domain.ports import CaseUnitOfWork, ChangeListener, Unsubscribe

log = logging.getLogger(__name__)

type UnitOfWorkFactory = Callable[[], CaseUnitOfWork]


def _snapshot(case: Case) -> Case:
    """Copy a loaded row into a fresh object that no session tracks."""

    return replace(case, tags=list(case.tags))


class SqlAlchemyCaseStore:
    """:class:`~caseflow.domain.ports.CaseStore` backed by the ``cases`` table."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory = SqlAlchemyCaseUnitOfWork,
        *,
        broadcaster: ChangeBroadcaster | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._broadcaster = broadcaster or ChangeBroadcaster()

    def get(self, case_id: str) -> Case:
        try:
            with self._uow_factory() as uow:
                case = uow.repositories.cases.get(case_id)
                if case is None:
                    raise CaseNotFoundError(case_id)
                return _snapshot(case)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to load case {case_id}") from exc

    def query(self, case_filter: CaseFilter | None = None) -> list[Case]:
        try:
            with self._uow_factory() as uow:
                cases = uow.repositories.cases.list(case_filter or CaseFilter())
                return [_snapshot(case) for case in cases]
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to query cases") from exc

    def add(self, case: Case) -> Case:
        stored = _snapshot(case)
        try:
            with self._uow_factory() as uow:
                uow.repositories.cases.add(stored)
                uow.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to add case {case.case_number}") from exc

        created = _snapshot(stored)
        self._broadcaster.publish(ChangeEvent(ChangeKind.INSERT, created.id, created))
        return created

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
    ) -> Case:
        try:
            with self._uow_factory() as uow:
                case = uow.repositories.cases.get(case_id)
                if case is None:
                    raise CaseNotFoundError(case_id)
                if tags is not None:
                    case.tags = list(tags)
                if priority is not None:
                    case.priority = priority
                if completed is not None:
                    case.completed = completed
                if archived is not None and archived != case.archived:
                    case.archived = archived
                    case.archived_at = datetime.now(tz=UTC) if archived else None
                if case_number is not None:
                    case.case_number = case_number
                if department is not None:
                    case.department = department
                if due is not None:
                    case.due = due
                uow.commit()
                updated = _snapshot(case)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to update case {case_id}") from exc

        self._broadcaster.publish(ChangeEvent(ChangeKind.UPDATE, case_id, updated))
        return updated

    def delete(self, case_id: str) -> None:
        try:
            with self._uow_factory() as uow:
                case = uow.repositories.cases.get(case_id)
                if case is None:
                    log.debug("Case %s already gone", case_id)
                    return
                uow.repositories.cases.remove(case)
                uow.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to delete case {case_id}") from exc

        self._broadcaster.publish(ChangeEvent(ChangeKind.DELETE, case_id))

    def subscribe(self, listener: ChangeListener) -> Unsubscribe:
        return self._broadcaster.subscribe(listener)


class SqlAlchemyAuditLog:
    """:class:`~caseflow.domain.ports.AuditLog` backed by ``case_history``."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory = SqlAlchemyCaseUnitOfWork,
        *,
        user_name: str | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._user_name = user_name

    def record(self, case_id: str, text: str) -> AuditEntry:
        entry = AuditEntry(case_id=case_id, text=text, user_name=self._user_name)
        try:
            with self._uow_factory() as uow:
                uow.repositories.history.add(entry)
                uow.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to record history for case {case_id}") from exc
        log.debug("History for %s: %s", case_id, text)
        return entry

    def history(self, case_id: str) -> list[AuditEntry]:
        try:
            with self._uow_factory() as uow:
                return uow.repositories.history.for_case(case_id)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to read history for case {case_id}") from exc


if TYPE_CHECKING:
    from caseflow.domain.ports import AuditLog, CaseStore

    _store_check: CaseStore = SqlAlchemyCaseStore()
    _audit_check: AuditLog = SqlAlchemyAuditLog()
