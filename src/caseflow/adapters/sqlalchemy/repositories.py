"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import delete, select

from caseflow.adapters.sqlalchemy.mappings import case_history_table, case_table
from caseflow.domain.model import AuditEntry, Case

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from caseflow.domain.ports import CaseFilter


class SqlAlchemyCaseRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Case) -> None:
        self.session.add(entity)

    def get(self, case_id: str) -> Case | None:
        return self.session.get(Case, case_id)

    def list(self, case_filter: CaseFilter) -> list[Case]:
        stmt = select(Case).order_by(case_table.c.due, case_table.c.created_at)
        if case_filter.archived is not None:
            stmt = stmt.where(case_table.c.archived == case_filter.archived)
        if case_filter.department is not None:
            stmt = stmt.where(case_table.c.department == case_filter.department)
        if case_filter.completed is not None:
            stmt = stmt.where(case_table.c.completed == case_filter.completed)
        cases = self.session.execute(stmt).scalars().all()
        # tags live in a JSON text column, so tag filters run here
        return [case for case in cases if case_filter.matches_tags(case.tags)]

    def remove(self, entity: Case) -> None:
        self.session.execute(
            delete(case_history_table).where(case_history_table.c.case_id == entity.id)
        )
        self.session.delete(entity)


class SqlAlchemyAuditEntryRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entry: AuditEntry) -> None:
        self.session.add(entry)

    def for_case(self, case_id: str) -> list[AuditEntry]:
        stmt = (
            select(AuditEntry)
            .where(case_history_table.c.case_id == case_id)
            .order_by(case_history_table.c.created_at, case_history_table.c.id)
        )
        return list(self.session.execute(stmt).scalars().all())


if TYPE_CHECKING:
    from caseflow.domain.ports import AuditEntryRepository, CaseRepository

    _session_stub = cast("Session", object())
    _case_repo: CaseRepository = SqlAlchemyCaseRepository(_session_stub)
    _history_repo: AuditEntryRepository = SqlAlchemyAuditEntryRepository(_session_stub)
