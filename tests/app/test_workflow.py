from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from caseflow.adapters.stats import FileStatsEngine
from caseflow.app import Workflow, build_workflow
from caseflow.domain.exclusion import ResetScope
from caseflow.domain.model import INCLUSION_OVERRIDE_REASON, ExclusionType, Stage
from tests.helpers.cases import InMemoryAuditLog, InMemoryCaseStore, make_case

if TYPE_CHECKING:
    from pathlib import Path


def _workflow(
    store: InMemoryCaseStore,
    tmp_path: Path | None = None,
    audit: InMemoryAuditLog | None = None,
) -> Workflow:
    engine = FileStatsEngine(tmp_path) if tmp_path is not None else None
    return build_workflow(store=store, audit=audit or InMemoryAuditLog(), stats_engine=engine)


def test_exclusion_refreshes_live_view() -> None:
    case = make_case("1001", tags=["stage-design"])
    store = InMemoryCaseStore([case])
    workflow = _workflow(store)
    written_elsewhere = make_case("1002")
    store.insert_silently(written_elsewhere)
    assert workflow.sync.get(written_elsewhere.id) is None

    result = workflow.toggle_exclusion(case.id, "design", "remake")

    assert result.ok
    assert workflow.sync.get(written_elsewhere.id) is not None
    cached = workflow.sync.get(case.id)
    assert cached is not None
    assert "stats-exclude:design" in cached.tags


def test_reset_refreshes_started_view() -> None:
    case = make_case("1001", tags=["stats-exclude:all"])
    store = InMemoryCaseStore([case])
    workflow = _workflow(store)

    report = workflow.reset_exclusions(ResetScope.ALL)

    assert report.updated == 1
    cached = workflow.sync.get(case.id)
    assert cached is not None
    assert cached.tags == []


def test_stage_moves_go_through_workflow() -> None:
    case = make_case("1001", tags=["stage-design"])
    store = InMemoryCaseStore([case])
    workflow = _workflow(store)

    workflow.change_stage(case, Stage.PRODUCTION)

    assert [entry.text for entry in workflow.history(case.id)] == [
        "Moved from Design to Production stage"
    ]


def test_load_stage_view_merges_store_exclusions(tmp_path: Path) -> None:
    measured = make_case("2001", tags=["stage-production"])
    late = make_case("2002", tags=["stage-production"])
    store = InMemoryCaseStore([measured, late])
    payload = {
        "averageTime": 3_600_000,
        "caseDetails": [
            {"id": measured.id, "timeInStage": 3_600_000, "isActive": True, "tags": []},
            {"id": "outlier", "timeInStage": 90_000_000, "isOutlier": True},
        ],
    }
    (tmp_path / "production.json").write_text(json.dumps(payload))
    workflow = _workflow(store, tmp_path)

    workflow.toggle_exclusion(late.id, "production", "late scan")
    view = workflow.load_stage_view("production")

    assert [case.id for case in view.active] == [measured.id]
    excluded = {case.id: case for case in view.excluded}
    assert excluded[late.id].exclusion_type is ExclusionType.MANUAL_STAGE
    assert excluded[late.id].exclusion_reason == "late scan"
    assert excluded["outlier"].exclusion_type is ExclusionType.AUTOMATIC_OUTLIER
    assert view.automatic_exclusions == 1


def test_load_stage_view_without_data(tmp_path: Path) -> None:
    workflow = _workflow(InMemoryCaseStore(), tmp_path)

    view = workflow.load_stage_view("qc")

    assert view.no_data is True
    assert view.total == 0


def test_load_stage_view_requires_engine() -> None:
    workflow = _workflow(InMemoryCaseStore())

    with pytest.raises(RuntimeError):
        workflow.load_stage_view("qc")


def _write_outlier_stats(tmp_path: Path, stage: str, case_id: str) -> None:
    payload = {
        "averageTime": 3_600_000,
        "caseDetails": [{"id": case_id, "timeInStage": 90_000_000, "isOutlier": True}],
    }
    (tmp_path / f"{stage}.json").write_text(json.dumps(payload))


def test_including_an_outlier_records_the_override(tmp_path: Path) -> None:
    case = make_case("3001", tags=["stage-qc"])
    store = InMemoryCaseStore([case])
    _write_outlier_stats(tmp_path, "qc", case.id)
    audit = InMemoryAuditLog()
    workflow = _workflow(store, tmp_path, audit)

    result = workflow.toggle_exclusion(case.id, None)

    assert result.ok
    assert store.tags_of(case.id) == [
        "stage-qc",
        f"stats-exclude-reason:{INCLUSION_OVERRIDE_REASON}",
    ]
    assert audit.texts(case.id) == [INCLUSION_OVERRIDE_REASON]


def test_including_an_overridden_outlier_writes_nothing(tmp_path: Path) -> None:
    tags = ["stage-qc", f"stats-exclude-reason:{INCLUSION_OVERRIDE_REASON}"]
    case = make_case("3001", tags=tags)
    store = InMemoryCaseStore([case])
    _write_outlier_stats(tmp_path, "qc", case.id)
    audit = InMemoryAuditLog()
    workflow = _workflow(store, tmp_path, audit)

    result = workflow.toggle_exclusion(case.id, None)

    assert result.ok
    assert store.updates == []
    assert audit.texts(case.id) == []


def test_including_a_manual_exclusion_ignores_outlier_state(tmp_path: Path) -> None:
    case = make_case("3001", tags=["stage-qc", "stats-exclude:qc"])
    store = InMemoryCaseStore([case])
    _write_outlier_stats(tmp_path, "qc", case.id)
    audit = InMemoryAuditLog()
    workflow = _workflow(store, tmp_path, audit)

    workflow.toggle_exclusion(case.id, None)

    assert store.tags_of(case.id) == ["stage-qc"]
    assert audit.texts(case.id) == ["Included in all statistics"]


def test_inclusion_without_engine_is_plain() -> None:
    case = make_case("3001", tags=["stage-qc", "stats-exclude"])
    store = InMemoryCaseStore([case])
    workflow = _workflow(store)

    workflow.toggle_exclusion(case.id, None)

    assert store.tags_of(case.id) == ["stage-qc"]
