"""Port for the external engine that computes stage durations and outliers."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from caseflow.domain.model import DepartmentEfficiency, Department, StageStatistics

type ProgressCallback = Callable[[float], None]


@runtime_checkable
class StatsEngine(Protocol):
    def compute_stage_statistics(
        self,
        stage: str,
        on_progress: ProgressCallback | None = None,
    ) -> StageStatistics: ...

    def compute_department_efficiency(
        self,
        department: Department,
        stage: str,
        stats: StageStatistics,
        count: int,
        on_progress: ProgressCallback | None = None,
    ) -> DepartmentEfficiency: ...
