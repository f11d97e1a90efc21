"""Stage moves for Digital cases and the Metal stage-2 flag."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Final

from caseflow.domain.errors import PersistenceError, WorkflowError
from caseflow.domain.history import record_history
from caseflow.domain.model import CaseTags, Department, Stage
from caseflow.domain.results import MutationResult

if TYPE_CHECKING:
    from caseflow.domain.model import Case
    from caseflow.domain.ports import AuditLog, CaseStore

log = logging.getLogger(__name__)

REPAIR_AUDIT_TEXT: Final[str] = "Sent for repair - moved directly to Finishing stage"
QC_ENTRY_AUDIT_TEXT: Final[str] = "Moved from Finishing to Quality Control"
QC_RETURN_AUDIT_TEXT: Final[str] = "Moved from Quality Control back to Finishing stage"
UNKNOWN_STAGE_NAME: Final[str] = "Unknown"
STAGE2_ON_AUDIT_TEXT: Final[str] = "Moved to Stage 2"
STAGE2_OFF_AUDIT_TEXT: Final[str] = "Moved back to Stage 1"


def stage_display_name(stage: str | None) -> str:
    if stage is None:
        return UNKNOWN_STAGE_NAME
    try:
        return Stage(stage).display_name
    except ValueError:
        return UNKNOWN_STAGE_NAME


def transition_audit_text(
    previous_stage_tags: tuple[str, ...],
    new_stage: str | None,
    *,
    is_repair: bool = False,
) -> str:
    """Pick the history line for a stage move.

    Rules apply in order: repair shortcut, entry into QC, return from QC to
    finishing, then the generic ``Moved from X to Y stage``. ``X`` is the first
    stage tag the case carried before the move.
    """

    if is_repair:
        return REPAIR_AUDIT_TEXT
    if new_stage == Stage.QC:
        return QC_ENTRY_AUDIT_TEXT
    if Stage.QC.value in previous_stage_tags and new_stage == Stage.FINISHING:
        return QC_RETURN_AUDIT_TEXT
    from_name = stage_display_name(previous_stage_tags[0] if previous_stage_tags else None)
    return f"Moved from {from_name} to {stage_display_name(new_stage)} stage"


class TransitionEngine:
    """Apply stage moves by rewriting a case's tag list.

    Any stage-to-stage move is accepted; which moves are offered is up to the
    caller. Each call reads the stored tags, computes the full new list and writes
    it back.
    """

    def __init__(self, store: CaseStore, audit: AuditLog) -> None:
        self._store = store
        self._audit = audit

    def change_stage(
        self,
        case: Case,
        new_stage: Stage | str | None,
        *,
        is_repair: bool = False,
    ) -> MutationResult:
        target = str(new_stage) if new_stage is not None else None
        try:
            current = self._store.get(case.id)
            flags = CaseTags.parse(current.tags)
            tags = flags.with_stage(target).to_tags()
            updated = self._store.update(case.id, tags=tags)
        except PersistenceError as exc:
            log.exception("Failed to move case %s to stage %s", case.id, target)
            return MutationResult.failure(case.id, exc)

        case.tags = list(updated.tags)
        text = transition_audit_text(flags.stage_tags, target, is_repair=is_repair)
        audit_text = record_history(self._audit, case.id, text)
        return MutationResult.success(case.id, updated.tags, audit_text)

    def toggle_stage2(self, case: Case) -> MutationResult:
        """Flip the ``stage2`` tag on a Metal case."""

        if case.department != Department.METAL:
            log.warning("Ignoring stage2 toggle for non-Metal case %s", case.id)
            error = WorkflowError(f"stage2 applies to Metal cases only, not {case.department}")
            return MutationResult.failure(case.id, error)
        try:
            current = self._store.get(case.id)
            flags = CaseTags.parse(current.tags)
            enabled = not flags.stage2
            tags = replace(flags, stage2=enabled).to_tags()
            updated = self._store.update(case.id, tags=tags)
        except PersistenceError as exc:
            log.exception("Failed to toggle stage2 on case %s", case.id)
            return MutationResult.failure(case.id, exc)

        case.tags = list(updated.tags)
        text = STAGE2_ON_AUDIT_TEXT if enabled else STAGE2_OFF_AUDIT_TEXT
        audit_text = record_history(self._audit, case.id, text)
        return MutationResult.success(case.id, updated.tags, audit_text)
