"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from caseflow.adapters.sqlalchemy import (
    SqlAlchemyAuditLog,
    SqlAlchemyCaseStore,
    is_started,
    startup,
)
from caseflow.config import get_audit_config
from caseflow.domain.exclusion import (
    BatchResetService,
    ExclusionService,
    ReconciledView,
    ResetScope,
    collect_manual_exclusions,
    has_inclusion_override,
    is_excluded,
    reconcile_stage_statistics,
    stage_exclusion_tags,
)
from caseflow.domain.errors import PersistenceError
from caseflow.domain.intake import CaseIntake
from caseflow.domain.model import Department, ExclusionType
from caseflow.domain.ports import CaseFilter
from caseflow.domain.stages import get_stage
from caseflow.domain.sync import CaseSync, UpdateNoticeHandler
from caseflow.domain.transitions import TransitionEngine

if TYPE_CHECKING:
    from collections.abc import Iterable

    from caseflow.domain.model import AuditEntry, Case, Stage
    from caseflow.domain.ports import AuditLog, CaseStore, ProgressCallback, StatsEngine
    from caseflow.domain.results import BatchItemResult, MutationResult, ResetReport

log = getLogger(__name__)


@dataclass(slots=True)
class Workflow:
    """Wires the domain services to one store and keeps the live view current."""

    store: CaseStore
    audit: AuditLog
    sync: CaseSync
    transitions: TransitionEngine
    exclusions: ExclusionService
    resets: BatchResetService
    intake: CaseIntake
    stats_engine: StatsEngine | None = None

    def get_case(self, case_id: str) -> Case:
        return self.store.get(case_id)

    def history(self, case_id: str) -> list[AuditEntry]:
        return self.audit.history(case_id)

    def change_stage(
        self, case: Case, new_stage: Stage | str | None, *, is_repair: bool = False
    ) -> MutationResult:
        return self.transitions.change_stage(case, new_stage, is_repair=is_repair)

    def toggle_stage2(self, case: Case) -> MutationResult:
        return self.transitions.toggle_stage2(case)

    def toggle_exclusion(
        self,
        case_id: str,
        scope: str | None,
        reason: str | None = None,
        *,
        automatic: bool | None = None,
    ) -> MutationResult:
        """Exclude a case for ``scope`` or, with ``scope=None``, include it again.

        Leaving ``automatic`` unset on an inclusion looks the case up in its stage's
        statistics. An automatic outlier gets an inclusion override and an existing
        override is kept.
        """

        if scope is None and automatic is None:
            automatic = self._needs_inclusion_override(case_id)
        result = self.exclusions.toggle_exclusion(
            case_id, scope, reason, automatic=bool(automatic)
        )
        self._refresh_view()
        return result

    def batch_toggle_exclusions(
        self,
        case_ids: Iterable[str],
        *,
        exclude: bool,
        stage: str | None = None,
        reason: str | None = None,
    ) -> list[BatchItemResult]:
        results = self.exclusions.batch_toggle_exclusions(
            case_ids, exclude=exclude, stage=stage, reason=reason
        )
        self._refresh_view()
        return results

    def reset_exclusions(
        self,
        scope: ResetScope | str,
        *,
        stage: str | None = None,
        department: Department = Department.DIGITAL,
    ) -> ResetReport:
        report = self.resets.reset_exclusions(scope, stage=stage, department=department)
        self._refresh_view()
        return report

    def load_stage_view(
        self,
        stage: str,
        *,
        department: Department = Department.DIGITAL,
        on_progress: ProgressCallback | None = None,
    ) -> ReconciledView:
        """Combine engine statistics with exclusions made since they were computed."""

        if self.stats_engine is None:
            raise RuntimeError("No statistics engine configured")
        stats = self.stats_engine.compute_stage_statistics(stage, on_progress)
        cases = self.store.query(
            CaseFilter(
                archived=None, department=department, any_tags=stage_exclusion_tags(stage)
            )
        )
        manual = collect_manual_exclusions(cases, stage)
        view = reconcile_stage_statistics(stats, manual)
        log.info(
            "Stage view %s: total=%s, included=%s, manual=%s, automatic=%s",
            stage,
            view.total,
            view.included_in_stats,
            view.manual_exclusions,
            view.automatic_exclusions,
        )
        return view

    def _needs_inclusion_override(self, case_id: str) -> bool:
        if self.stats_engine is None:
            return False
        try:
            case = self.store.get(case_id)
        except PersistenceError:
            log.warning("Cannot load case %s to check for an outlier exclusion", case_id)
            return False
        if has_inclusion_override(case.tags):
            return True

        stage = str(get_stage(case))
        if is_excluded(case.tags, stage):
            return False
        view = self.load_stage_view(stage, department=case.department)
        return any(
            excluded.id == case_id
            and excluded.exclusion_type is ExclusionType.AUTOMATIC_OUTLIER
            for excluded in view.excluded
        )

    def _refresh_view(self) -> None:
        if self.sync.started:
            self.sync.refresh()


def build_workflow(
    *,
    store: CaseStore | None = None,
    audit: AuditLog | None = None,
    stats_engine: StatsEngine | None = None,
    on_update_notice: UpdateNoticeHandler | None = None,
    start_sync: bool = True,
) -> Workflow:
    """Build a workflow on the configured adapters unless ports are passed in."""

    if store is None or audit is None:
        if not is_started():
            startup()
        store = store or SqlAlchemyCaseStore()
        audit = audit or SqlAlchemyAuditLog(user_name=get_audit_config().user_name)

    sync = CaseSync(store, on_update_notice=on_update_notice)
    if start_sync:
        sync.start()
    return Workflow(
        store=store,
        audit=audit,
        sync=sync,
        transitions=TransitionEngine(store, audit),
        exclusions=ExclusionService(store, audit),
        resets=BatchResetService(store, audit),
        intake=CaseIntake(store, audit),
        stats_engine=stats_engine,
    )
