"""Statistics engine that reads precomputed payloads from JSON files.

The engine itself (working-hours arithmetic, outlier detection) runs elsewhere;
it drops one ``<stage>.json`` per stage and optionally one
``<department>-<stage>.efficiency.json`` per department into a directory.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from caseflow.domain.model import DepartmentEfficiency, StageStatistics

from .schema import DepartmentEfficiencyPayload, StageStatisticsPayload
from .translator import parse_department_efficiency, parse_stage_statistics

if TYPE_CHECKING:
    from caseflow.domain.model import Department
    from caseflow.domain.ports import ProgressCallback

log = logging.getLogger(__name__)


class FileStatsEngine:
    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def stage_path(self, stage: str) -> Path:
        return self.directory / f"{stage}.json"

    def efficiency_path(self, department: Department, stage: str) -> Path:
        slug = department.value.lower().replace("&", "")
        return self.directory / f"{slug}-{stage}.efficiency.json"

    def compute_stage_statistics(
        self,
        stage: str,
        on_progress: ProgressCallback | None = None,
    ) -> StageStatistics:
        path = self.stage_path(stage)
        if not path.exists():
            log.info("No statistics file for stage %s at %s", stage, path)
            return StageStatistics(stage=stage, no_data=True)
        try:
            payload = StageStatisticsPayload.model_validate_json(path.read_bytes())
        except (OSError, ValidationError) as exc:
            log.exception("Unreadable statistics file %s", path)
            return StageStatistics(stage=stage, error=str(exc))
        if on_progress is not None:
            on_progress(1.0)
        return parse_stage_statistics(stage, payload)

    def compute_department_efficiency(
        self,
        department: Department,
        stage: str,
        stats: StageStatistics,
        count: int,
        on_progress: ProgressCallback | None = None,
    ) -> DepartmentEfficiency:
        _ = count
        if stats.no_data or stats.error:
            return DepartmentEfficiency(no_data=stats.no_data, error=stats.error)
        path = self.efficiency_path(department, stage)
        if not path.exists():
            return DepartmentEfficiency(no_data=True)
        try:
            payload = DepartmentEfficiencyPayload.model_validate_json(path.read_bytes())
        except (OSError, ValidationError) as exc:
            log.exception("Unreadable efficiency file %s", path)
            return DepartmentEfficiency(error=str(exc))
        if on_progress is not None:
            on_progress(1.0)
        return parse_department_efficiency(payload)


if TYPE_CHECKING:
    from caseflow.domain.ports import StatsEngine

    _engine_check: StatsEngine = FileStatsEngine(".")
