"""Translate statistics engine payloads into domain values."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from caseflow.domain.model import (
    DepartmentEfficiency,
    ExcludedCaseDetail,
    StageCaseDetail,
    StageStatistics,
)

from .schema import (
    CaseDetailPayload,
    DepartmentEfficiencyPayload,
    ExcludedCasePayload,
    StageStatisticsInput,
    StageStatisticsPayload,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

log = getLogger(__name__)


def _ensure_payload(payload: StageStatisticsInput) -> StageStatisticsPayload:
    if isinstance(payload, StageStatisticsPayload):
        return payload
    return StageStatisticsPayload.model_validate(payload)


def _case_detail(payload: CaseDetailPayload) -> StageCaseDetail:
    return StageCaseDetail(
        id=payload.id,
        time_in_stage=payload.time_in_stage,
        is_active=payload.is_active,
        is_outlier=payload.is_outlier,
        tags=tuple(payload.tags),
        case_number=payload.case_number,
        visit_count=payload.visit_count,
        priority=payload.priority,
        rush=payload.rush,
    )


def _excluded_case(payload: ExcludedCasePayload) -> ExcludedCaseDetail:
    return ExcludedCaseDetail(
        id=payload.id,
        reason=payload.reason,
        time_in_stage=payload.time_in_stage,
        tags=tuple(payload.tags),
        case_number=payload.case_number,
        visit_count=payload.visit_count,
        priority=payload.priority,
        rush=payload.rush,
    )


def parse_stage_statistics(stage: str, payload: StageStatisticsInput) -> StageStatistics:
    model = _ensure_payload(payload)
    stats = StageStatistics(
        stage=stage,
        average_time=model.average_time,
        median_time=model.median_time,
        case_details=tuple(_case_detail(detail) for detail in model.case_details),
        excluded_cases=tuple(_excluded_case(detail) for detail in model.excluded_cases),
        no_data=model.no_data,
        error=model.error,
    )
    if stats.no_data:
        log.info("No statistics for stage %s: %s", stage, model.message or "no valid cases")
    return stats


def parse_department_efficiency(
    payload: DepartmentEfficiencyPayload | Mapping[str, object],
) -> DepartmentEfficiency:
    model = (
        payload
        if isinstance(payload, DepartmentEfficiencyPayload)
        else DepartmentEfficiencyPayload.model_validate(payload)
    )
    return DepartmentEfficiency(score=model.score, no_data=model.no_data, error=model.error)
