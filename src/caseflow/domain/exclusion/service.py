"""Write manual exclusion and inclusion decisions to case tags."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from caseflow.domain.errors import CaseNotFoundError, PersistenceError
from caseflow.domain.history import record_history
from caseflow.domain.model import INCLUSION_OVERRIDE_REASON, CaseTags, ExclusionTags
from caseflow.domain.results import BatchItemResult, MutationResult

from .policy import ALL_SCOPE, exclusion_for_scope

if TYPE_CHECKING:
    from collections.abc import Iterable

    from caseflow.domain.ports import AuditLog, CaseStore

log = logging.getLogger(__name__)


def _excluded_text(stage: str | None) -> str:
    if stage is None or stage == ALL_SCOPE:
        return "Excluded from all statistics"
    return f"Excluded from {stage} stage statistics"


def _included_text(stage: str | None) -> str:
    if stage is None or stage == ALL_SCOPE:
        return "Included in all statistics"
    return f"Included in {stage} stage statistics"


def _same_tags(left: Iterable[str], right: Iterable[str]) -> bool:
    return set(left) == set(right)


class ExclusionService:
    """Set a case's manual exclusion scope.

    Every call replaces the whole ``stats-exclude*`` family on the case, so
    repeating a call leaves the tags unchanged and writes nothing.
    """

    def __init__(self, store: CaseStore, audit: AuditLog) -> None:
        self._store = store
        self._audit = audit

    def toggle_exclusion(
        self,
        case_id: str,
        scope: str | None,
        reason: str | None = None,
        *,
        automatic: bool = False,
    ) -> MutationResult:
        """Exclude ``case_id`` for ``scope`` or, with ``scope=None``, include it.

        ``automatic`` tells the service the case is currently excluded by the
        statistics engine. Including such a case writes the override reason so the
        engine honours the inclusion on its next run.
        """

        if scope is None and automatic:
            exclusion = ExclusionTags(reasons=(INCLUSION_OVERRIDE_REASON,))
            text = INCLUSION_OVERRIDE_REASON
        elif scope is None:
            exclusion = ExclusionTags()
            text = _included_text(None)
        else:
            exclusion = exclusion_for_scope(scope, reason)
            text = _excluded_text(scope)

        try:
            current = self._store.get(case_id)
            tags = CaseTags.parse(current.tags).without_exclusions().with_exclusion(exclusion)
            new_tags = tags.to_tags()
            if _same_tags(new_tags, current.tags):
                log.debug("Exclusion for case %s already at scope %s", case_id, scope)
                return MutationResult.success(case_id, current.tags)
            updated = self._store.update(case_id, tags=new_tags)
        except PersistenceError as exc:
            log.exception("Failed to set exclusion scope %s on case %s", scope, case_id)
            return MutationResult.failure(case_id, exc)

        audit_text = record_history(self._audit, case_id, text)
        return MutationResult.success(case_id, updated.tags, audit_text)

    def batch_toggle_exclusions(
        self,
        case_ids: Iterable[str],
        *,
        exclude: bool,
        stage: str | None = None,
        reason: str | None = None,
    ) -> list[BatchItemResult]:
        """Exclude or include several cases, one at a time.

        Best effort: a failed case does not stop the batch and earlier writes are
        kept. Ids that no longer exist are skipped.
        """

        scope = (stage or ALL_SCOPE) if exclude else None
        exclusion = exclusion_for_scope(scope, reason)
        text = _excluded_text(stage) if exclude else _included_text(stage)

        results: list[BatchItemResult] = []
        for case_id in case_ids:
            try:
                current = self._store.get(case_id)
            except CaseNotFoundError:
                log.info("Skipping missing case %s in batch exclusion", case_id)
                continue
            except PersistenceError as exc:
                log.exception("Failed to load case %s for batch exclusion", case_id)
                results.append(BatchItemResult(case_id=case_id, ok=False, error=exc))
                continue

            parsed = CaseTags.parse(current.tags).without_exclusions()
            new_tags = parsed.with_exclusion(exclusion).to_tags()
            try:
                self._store.update(case_id, tags=new_tags)
            except PersistenceError as exc:
                log.exception("Failed to write batch exclusion for case %s", case_id)
                results.append(BatchItemResult(case_id=case_id, ok=False, error=exc))
                continue

            record_history(self._audit, case_id, text)
            results.append(BatchItemResult(case_id=case_id, ok=True))
        return results
