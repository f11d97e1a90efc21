"""Case creation and edits, flag toggles and the duplicate case-number check."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Final

from caseflow.domain.errors import PersistenceError
from caseflow.domain.history import record_history
from caseflow.domain.model import Case, CaseTags, CaseType, Department, Stage
from caseflow.domain.ports import CaseFilter
from caseflow.domain.results import MutationResult

if TYPE_CHECKING:
    from datetime import date

    from caseflow.domain.ports import AuditLog, CaseStore

log = logging.getLogger(__name__)

CREATED_AUDIT_TEXT: Final[str] = "Case created"
CREATED_FOR_REPAIR_AUDIT_TEXT: Final[str] = "Case created and sent directly to Finishing for repair"


def initial_tags(
    department: Department,
    *,
    rush: bool = False,
    hold: bool = False,
    case_type: CaseType = CaseType.GENERAL,
    needs_repair: bool = False,
) -> list[str]:
    stage: str | None = None
    if department == Department.DIGITAL:
        stage = Stage.FINISHING if needs_repair else Stage.DESIGN
    flags = CaseTags(
        rush=rush,
        hold=hold,
        bbs=case_type is CaseType.BBS,
        flex=case_type is CaseType.FLEX,
    )
    return flags.with_stage(stage).to_tags()


def case_number_key(case_number: str) -> str:
    """First whitespace-separated token, lower-cased; ``""`` for a blank number."""

    parts = case_number.strip().lower().split()
    return parts[0] if parts else ""


def _edit_history(before: Case, after: Case, old: CaseTags, new: CaseTags) -> list[str]:
    texts: list[str] = []
    for flag in ("rush", "hold", "bbs", "flex"):
        was, now = getattr(old, flag), getattr(new, flag)
        if was != now:
            texts.append(f"{flag} added" if now else f"{flag} removed")
    if before.priority != after.priority:
        texts.append("Priority added" if after.priority else "Priority removed")
    if before.case_number != after.case_number:
        texts.append(f"Case # changed from {before.case_number} to {after.case_number}")
    if before.department != after.department:
        texts.append(f"Department changed from {before.department} to {after.department}")
    if before.due != after.due:
        texts.append(f"Due changed from {before.due.isoformat()} to {after.due.isoformat()}")
    return texts


class CaseIntake:
    def __init__(self, store: CaseStore, audit: AuditLog) -> None:
        self._store = store
        self._audit = audit

    def create_case(
        self,
        case_number: str,
        department: Department,
        due: date,
        *,
        priority: bool = False,
        rush: bool = False,
        hold: bool = False,
        case_type: CaseType = CaseType.GENERAL,
        needs_repair: bool = False,
    ) -> MutationResult:
        case = Case(
            case_number=case_number.strip(),
            department=department,
            due=due,
            priority=priority,
            tags=initial_tags(
                department,
                rush=rush,
                hold=hold,
                case_type=case_type,
                needs_repair=needs_repair,
            ),
        )
        try:
            stored = self._store.add(case)
        except PersistenceError as exc:
            log.exception("Failed to create case %s", case.case_number)
            return MutationResult.failure(case.id, exc)

        repair = needs_repair and department == Department.DIGITAL
        text = CREATED_FOR_REPAIR_AUDIT_TEXT if repair else CREATED_AUDIT_TEXT
        return MutationResult.success(
            stored.id, stored.tags, record_history(self._audit, stored.id, text)
        )

    def update_case(
        self,
        case: Case,
        *,
        case_number: str | None = None,
        department: Department | None = None,
        due: date | None = None,
        priority: bool | None = None,
        rush: bool | None = None,
        hold: bool | None = None,
        case_type: CaseType | None = None,
    ) -> MutationResult:
        """Edit a case's details; ``None`` keeps the stored value.

        Stage, stage 2 and exclusion tags are kept as stored. One history row is
        written per changed field.
        """

        try:
            current = self._store.get(case.id)
            flags = CaseTags.parse(current.tags)
            new_type = flags.case_type if case_type is None else case_type
            new_flags = replace(
                flags,
                rush=flags.rush if rush is None else rush,
                hold=flags.hold if hold is None else hold,
                bbs=new_type is CaseType.BBS,
                flex=new_type is CaseType.FLEX,
            )
            new_number = current.case_number if case_number is None else case_number.strip()
            updated = self._store.update(
                case.id,
                tags=new_flags.to_tags(),
                priority=priority,
                case_number=new_number,
                department=department,
                due=due,
            )
        except PersistenceError as exc:
            log.exception("Failed to update case %s", case.id)
            return MutationResult.failure(case.id, exc)

        case.case_number = updated.case_number
        case.department = updated.department
        case.due = updated.due
        case.priority = updated.priority
        case.tags = list(updated.tags)
        recorded: list[str] = []
        for text in _edit_history(current, updated, flags, new_flags):
            if record_history(self._audit, case.id, text) is not None:
                recorded.append(text)
        return MutationResult.success(case.id, updated.tags, "; ".join(recorded) or None)

    def toggle_rush(self, case: Case) -> MutationResult:
        return self._toggle_flag(case, "rush")

    def toggle_hold(self, case: Case) -> MutationResult:
        return self._toggle_flag(case, "hold")

    def _toggle_flag(self, case: Case, flag: str) -> MutationResult:
        try:
            current = self._store.get(case.id)
            flags = CaseTags.parse(current.tags)
            enabled = not getattr(flags, flag)
            tags = replace(flags, **{flag: enabled}).to_tags()
            updated = self._store.update(case.id, tags=tags)
        except PersistenceError as exc:
            log.exception("Failed to toggle %s on case %s", flag, case.id)
            return MutationResult.failure(case.id, exc)

        case.tags = list(updated.tags)
        text = f"{flag} added" if enabled else f"{flag} removed"
        audit_text = record_history(self._audit, case.id, text)
        return MutationResult.success(case.id, updated.tags, audit_text)

    def toggle_priority(self, case: Case) -> MutationResult:
        try:
            current = self._store.get(case.id)
            updated = self._store.update(case.id, priority=not current.priority)
        except PersistenceError as exc:
            log.exception("Failed to toggle priority on case %s", case.id)
            return MutationResult.failure(case.id, exc)

        case.priority = updated.priority
        text = "Priority added" if updated.priority else "Priority removed"
        audit_text = record_history(self._audit, case.id, text)
        return MutationResult.success(case.id, updated.tags, audit_text)

    def toggle_complete(self, case: Case) -> MutationResult:
        try:
            current = self._store.get(case.id)
            updated = self._store.update(case.id, completed=not current.completed)
        except PersistenceError as exc:
            log.exception("Failed to toggle completion on case %s", case.id)
            return MutationResult.failure(case.id, exc)

        case.completed = updated.completed
        text = "Marked done" if updated.completed else "Undo done"
        audit_text = record_history(self._audit, case.id, text)
        return MutationResult.success(case.id, updated.tags, audit_text)

    def find_duplicates(self, case_number: str, exclude_id: str | None = None) -> list[Case]:
        """Open cases whose number starts with the same token as ``case_number``."""

        key = case_number_key(case_number)
        if not key:
            return []
        try:
            candidates = self._store.query(CaseFilter(archived=False, completed=False))
        except PersistenceError:
            log.exception("Duplicate check failed for %s", case_number)
            return []
        return [
            case
            for case in candidates
            if case.id != exclude_id and case_number_key(case.case_number) == key
        ]
