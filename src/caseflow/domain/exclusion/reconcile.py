"""Merge the three sources of exclusion information into one categorized view.

Sources, richest first:

1. ``case_details`` from the statistics engine (every case it measured, with the
   outlier flag),
2. ``excluded_cases`` from the statistics engine (cases it left out),
3. manual exclusions queried from the case store, which catch exclusions made
   after the statistics were computed.

A case id is classified by the first source that mentions it and ignored by the
later ones, so each id lands in exactly one bucket.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from caseflow.domain.model import ExclusionType
from caseflow.domain.stages import get_stage

from .policy import classify_manual, get_exclusion_reason, has_inclusion_override, is_excluded

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from caseflow.domain.model import (
        Case,
        ExcludedCaseDetail,
        StageCaseDetail,
        StageStatistics,
    )

MANUAL_REASON_DEFAULT: Final[str] = "Manually excluded"
AUTOMATIC_REASON_DEFAULT: Final[str] = "Data quality issue"
NO_DURATION: Final[str] = "—"

_MS_PER_MINUTE: Final[int] = 60_000
_MS_PER_HOUR: Final[int] = 3_600_000


def format_duration(ms: float | None) -> str:
    """Render working time as ``2d 3h``, ``5h 12m`` or ``40m``."""

    if ms is None or not math.isfinite(ms) or ms <= 0:
        return NO_DURATION
    hours = int(ms // _MS_PER_HOUR)
    days = hours // 24
    minutes = int((ms % _MS_PER_HOUR) // _MS_PER_MINUTE)
    if days > 0:
        return f"{days}d {hours % 24}h"
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def outlier_reason(ms: float | None) -> str:
    return f"Statistical outlier ({format_duration(ms)})"


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciledCase:
    id: str
    time_in_stage: float = 0.0
    is_active: bool = False
    tags: tuple[str, ...] = ()
    case_number: str | None = None
    visit_count: int = 0
    priority: bool = False
    rush: bool = False
    exclusion_type: ExclusionType | None = None
    exclusion_reason: str | None = None

    @property
    def is_excluded(self) -> bool:
        return self.exclusion_type is not None


@dataclass(frozen=True, slots=True)
class ReconciledView:
    active: tuple[ReconciledCase, ...] = ()
    completed: tuple[ReconciledCase, ...] = ()
    excluded: tuple[ReconciledCase, ...] = ()
    no_data: bool = False
    error: str | None = None

    @property
    def total(self) -> int:
        return len(self.active) + len(self.completed) + len(self.excluded)

    @property
    def included_in_stats(self) -> int:
        return len(self.active) + len(self.completed)

    @property
    def manual_exclusions(self) -> int:
        return sum(
            1 for case in self.excluded if case.exclusion_type and case.exclusion_type.is_manual
        )

    @property
    def automatic_exclusions(self) -> int:
        return sum(
            1 for case in self.excluded if case.exclusion_type and case.exclusion_type.is_automatic
        )

    def ids(self) -> list[str]:
        return [case.id for case in (*self.active, *self.completed, *self.excluded)]


def _duration_key(case: ReconciledCase) -> tuple[float, str]:
    return (-case.time_in_stage, case.id)


def _excluded_key(case: ReconciledCase) -> tuple[bool, float, str]:
    # outliers sink below every other exclusion
    return (case.exclusion_type is ExclusionType.AUTOMATIC_OUTLIER, -case.time_in_stage, case.id)


def _from_detail(
    detail: StageCaseDetail,
    exclusion_type: ExclusionType | None = None,
    exclusion_reason: str | None = None,
) -> ReconciledCase:
    return ReconciledCase(
        id=detail.id,
        time_in_stage=detail.time_in_stage,
        is_active=detail.is_active,
        tags=detail.tags,
        case_number=detail.case_number,
        visit_count=detail.visit_count,
        priority=detail.priority,
        rush=detail.rush,
        exclusion_type=exclusion_type,
        exclusion_reason=exclusion_reason,
    )


def _from_excluded(detail: ExcludedCaseDetail, stage: str) -> ReconciledCase:
    if is_excluded(detail.tags, stage):
        exclusion_type = classify_manual(detail.tags)
        reason = get_exclusion_reason(detail.tags) or detail.reason or MANUAL_REASON_DEFAULT
    else:
        exclusion_type = ExclusionType.AUTOMATIC
        reason = detail.reason or AUTOMATIC_REASON_DEFAULT
    return ReconciledCase(
        id=detail.id,
        time_in_stage=detail.time_in_stage or 0.0,
        is_active=False,
        tags=detail.tags,
        case_number=detail.case_number,
        visit_count=detail.visit_count,
        priority=detail.priority,
        rush=detail.rush,
        exclusion_type=exclusion_type,
        exclusion_reason=reason,
    )


def reconcile_stage_cases(
    *,
    stage: str,
    case_details: Iterable[StageCaseDetail] = (),
    excluded_cases: Iterable[ExcludedCaseDetail] = (),
    manual_exclusions: Iterable[ReconciledCase] = (),
    no_data: bool = False,
    error: str | None = None,
) -> ReconciledView:
    active: list[ReconciledCase] = []
    completed: list[ReconciledCase] = []
    excluded: list[ReconciledCase] = []
    processed: set[str] = set()

    for detail in case_details:
        if detail.id in processed:
            continue
        processed.add(detail.id)
        manually_excluded = is_excluded(detail.tags, stage)
        if detail.is_outlier and not manually_excluded and not has_inclusion_override(detail.tags):
            excluded.append(
                _from_detail(
                    detail,
                    ExclusionType.AUTOMATIC_OUTLIER,
                    outlier_reason(detail.time_in_stage),
                )
            )
        elif manually_excluded:
            excluded.append(
                _from_detail(
                    detail,
                    classify_manual(detail.tags),
                    get_exclusion_reason(detail.tags) or MANUAL_REASON_DEFAULT,
                )
            )
        elif detail.is_active:
            active.append(_from_detail(detail))
        else:
            completed.append(_from_detail(detail))

    for excluded_detail in excluded_cases:
        if excluded_detail.id in processed:
            continue
        processed.add(excluded_detail.id)
        excluded.append(_from_excluded(excluded_detail, stage))

    for manual in manual_exclusions:
        if manual.id in processed:
            continue
        processed.add(manual.id)
        excluded.append(manual)

    return ReconciledView(
        active=tuple(sorted(active, key=_duration_key)),
        completed=tuple(sorted(completed, key=_duration_key)),
        excluded=tuple(sorted(excluded, key=_excluded_key)),
        no_data=no_data,
        error=error,
    )


def reconcile_stage_statistics(
    stats: StageStatistics,
    manual_exclusions: Iterable[ReconciledCase] = (),
) -> ReconciledView:
    return reconcile_stage_cases(
        stage=stats.stage,
        case_details=stats.case_details,
        excluded_cases=stats.excluded_cases,
        manual_exclusions=manual_exclusions,
        no_data=stats.no_data,
        error=stats.error,
    )


def collect_manual_exclusions(
    cases: Iterable[Case],
    stage: str,
    *,
    time_in_stage: Callable[[Case], float] | None = None,
) -> list[ReconciledCase]:
    """Build third-source entries from stored cases excluded for ``stage``.

    The store does not know stage durations; pass ``time_in_stage`` to fill them
    in, otherwise they are zero.
    """

    collected: list[ReconciledCase] = []
    for case in cases:
        if not is_excluded(case.tags, stage):
            continue
        collected.append(
            ReconciledCase(
                id=case.id,
                time_in_stage=time_in_stage(case) if time_in_stage is not None else 0.0,
                is_active=not case.completed and get_stage(case) == stage,
                tags=tuple(case.tags),
                case_number=case.case_number,
                priority=case.priority,
                rush=case.rush,
                exclusion_type=classify_manual(case.tags),
                exclusion_reason=get_exclusion_reason(case.tags) or MANUAL_REASON_DEFAULT,
            )
        )
    return collected
