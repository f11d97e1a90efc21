from __future__ import annotations

import json
from typing import TYPE_CHECKING

from caseflow.adapters.stats import FileStatsEngine
from caseflow.domain.model import Department

if TYPE_CHECKING:
    from pathlib import Path


def test_missing_stage_file_means_no_data(tmp_path: Path) -> None:
    stats = FileStatsEngine(tmp_path).compute_stage_statistics("design")

    assert stats.no_data is True
    assert stats.error is None


def test_stage_file_is_parsed_and_progress_reported(tmp_path: Path) -> None:
    payload = {"averageTime": 10, "caseDetails": [{"id": "x", "timeInStage": 10}]}
    (tmp_path / "production.json").write_text(json.dumps(payload))
    progress: list[float] = []

    stats = FileStatsEngine(tmp_path).compute_stage_statistics("production", progress.append)

    assert [detail.id for detail in stats.case_details] == ["x"]
    assert progress == [1.0]


def test_invalid_stage_file_becomes_error_value(tmp_path: Path) -> None:
    (tmp_path / "qc.json").write_text('{"caseDetails": [{"timeInStage": 1}]}')

    stats = FileStatsEngine(tmp_path).compute_stage_statistics("qc")

    assert stats.error is not None
    assert stats.no_data is False


def test_department_efficiency_file(tmp_path: Path) -> None:
    engine = FileStatsEngine(tmp_path)
    (tmp_path / "design.json").write_text("{}")
    engine.efficiency_path(Department.DIGITAL, "design").write_text('{"score": 91}')
    stats = engine.compute_stage_statistics("design")

    efficiency = engine.compute_department_efficiency(Department.DIGITAL, "design", stats, 3)

    assert efficiency.score == 91
    assert engine.efficiency_path(Department.CROWN_AND_BRIDGE, "qc").name == "cb-qc.efficiency.json"


def test_efficiency_without_stage_data(tmp_path: Path) -> None:
    engine = FileStatsEngine(tmp_path)
    stats = engine.compute_stage_statistics("design")

    efficiency = engine.compute_department_efficiency(Department.DIGITAL, "design", stats, 0)

    assert efficiency.no_data is True
