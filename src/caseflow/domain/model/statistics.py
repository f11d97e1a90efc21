"""Values produced by the external stage statistics engine.

Durations are milliseconds of working time spent in a stage.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, kw_only=True)
class StageCaseDetail:
    id: str
    time_in_stage: float = 0.0
    is_active: bool = False
    is_outlier: bool = False
    tags: tuple[str, ...] = ()
    case_number: str | None = None
    visit_count: int = 0
    priority: bool = False
    rush: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class ExcludedCaseDetail:
    id: str
    reason: str | None = None
    time_in_stage: float = 0.0
    tags: tuple[str, ...] = ()
    case_number: str | None = None
    visit_count: int = 0
    priority: bool = False
    rush: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class StageStatistics:
    """Per-stage statistics. ``no_data``/``error`` are ordinary outcomes, not failures."""

    stage: str
    average_time: float = 0.0
    median_time: float = 0.0
    case_details: tuple[StageCaseDetail, ...] = ()
    excluded_cases: tuple[ExcludedCaseDetail, ...] = ()
    no_data: bool = False
    error: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class DepartmentEfficiency:
    score: float | None = None
    no_data: bool = False
    error: str | None = None
