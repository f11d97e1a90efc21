"""Bulk removal of manual exclusion tags.

Automatic (outlier) exclusions are not stored in tags, so neither scope can
touch them.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from functools import partial
from typing import TYPE_CHECKING

from caseflow.domain.errors import PersistenceError
from caseflow.domain.history import record_history
from caseflow.domain.model import CaseTags, Department, ExclusionTags
from caseflow.domain.model.tags import is_exclusion_family
from caseflow.domain.ports import CaseFilter
from caseflow.domain.results import BatchItemResult, ResetReport

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from caseflow.domain.ports import AuditLog, CaseStore

log = logging.getLogger(__name__)


class ResetScope(StrEnum):
    STAGE = "stage"
    ALL = "all"


def _has_stage_exclusion(exclusion: ExclusionTags, stage: str) -> bool:
    return (
        stage in exclusion.scoped
        or stage in exclusion.legacy
        or (exclusion.bare and not exclusion.all_stages)
    )


def reset_stage_tags(tags: Iterable[str], stage: str) -> list[str]:
    """Remove ``stage``'s manual exclusion from ``tags``.

    Drops ``stats-exclude:<stage>``, ``stats-exclude-<stage>`` and the bare
    ``stats-exclude`` unless ``stats-exclude:all`` is present; ``:all`` itself
    is never removed. Reason tags go only once no exclusion tag is left. Cases
    without an exclusion for ``stage`` come back unchanged.
    """

    tag_list = list(tags)
    flags = CaseTags.parse(tag_list)
    exclusion = flags.exclusion
    if not _has_stage_exclusion(exclusion, stage):
        return tag_list

    remaining = ExclusionTags(
        bare=exclusion.bare and exclusion.all_stages,
        all_stages=exclusion.all_stages,
        scoped=tuple(scoped for scoped in exclusion.scoped if scoped != stage),
        legacy=tuple(legacy for legacy in exclusion.legacy if legacy != stage),
        reasons=exclusion.reasons,
    )
    if not remaining.has_signal:
        remaining = ExclusionTags()
    return flags.with_exclusion(remaining).to_tags()


def reset_all_tags(tags: Iterable[str]) -> list[str]:
    """Remove every ``stats-exclude*`` tag, reasons included."""

    tag_list = list(tags)
    if not any(is_exclusion_family(tag) for tag in tag_list):
        return tag_list
    return CaseTags.parse(tag_list).without_exclusions().to_tags()


class BatchResetService:
    """Reset manual exclusions across many cases.

    Cases are written one by one. A failed write is reported and the batch goes
    on; there is no rollback of cases already written.
    """

    def __init__(self, store: CaseStore, audit: AuditLog) -> None:
        self._store = store
        self._audit = audit

    def reset_exclusions(
        self,
        scope: ResetScope | str,
        *,
        stage: str | None = None,
        department: Department = Department.DIGITAL,
    ) -> ResetReport:
        resolved = ResetScope(scope)
        transform: Callable[[Iterable[str]], list[str]]
        if resolved is ResetScope.STAGE:
            if not stage:
                raise ValueError("A stage is required for a stage-scoped reset")
            transform = partial(reset_stage_tags, stage=stage)
            case_filter = CaseFilter(archived=None, department=department)
            text = f"Statistics exclusions reset for {stage} stage"
        else:
            transform = reset_all_tags
            case_filter = CaseFilter(archived=None)
            text = "All statistics exclusions reset"

        report = ResetReport()
        try:
            cases = self._store.query(case_filter)
        except PersistenceError as exc:
            log.exception("Failed to load cases for exclusion reset")
            report.error = exc
            return report

        for case in cases:
            report.scanned += 1
            new_tags = transform(case.tags)
            if set(new_tags) == set(case.tags):
                continue
            try:
                self._store.update(case.id, tags=new_tags)
            except PersistenceError as exc:
                log.exception("Failed to reset exclusions on case %s", case.id)
                report.failed.append(BatchItemResult(case_id=case.id, ok=False, error=exc))
                continue
            report.updated += 1
            record_history(self._audit, case.id, text)

        log.info(
            "Exclusion reset (%s%s): scanned=%s, updated=%s, failed=%s",
            resolved,
            f":{stage}" if stage and resolved is ResetScope.STAGE else "",
            report.scanned,
            report.updated,
            len(report.failed),
        )
        return report
