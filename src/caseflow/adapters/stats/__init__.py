"""Public interface for the statistics engine adapter."""

from __future__ import annotations

from .engine import FileStatsEngine
from .schema import (
    CaseDetailPayload,
    DepartmentEfficiencyPayload,
    ExcludedCasePayload,
    StageStatisticsInput,
    StageStatisticsPayload,
)
from .translator import parse_department_efficiency, parse_stage_statistics

__all__ = [
    "CaseDetailPayload",
    "DepartmentEfficiencyPayload",
    "ExcludedCasePayload",
    "FileStatsEngine",
    "StageStatisticsInput",
    "StageStatisticsPayload",
    "parse_department_efficiency",
    "parse_stage_statistics",
]
