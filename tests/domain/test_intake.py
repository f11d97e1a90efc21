from __future__ import annotations

from datetime import date

from caseflow.domain.intake import CaseIntake, case_number_key, initial_tags
from caseflow.domain.model import Case, CaseType, Department
from tests.helpers.cases import InMemoryAuditLog, InMemoryCaseStore, make_case


def _intake(*cases: Case) -> tuple[CaseIntake, InMemoryCaseStore, InMemoryAuditLog]:
    store = InMemoryCaseStore(cases)
    audit = InMemoryAuditLog()
    return CaseIntake(store, audit), store, audit


def test_digital_case_starts_in_design() -> None:
    intake, store, audit = _intake()

    result = intake.create_case(
        "  4521 Smith  ", Department.DIGITAL, date(2025, 5, 2), rush=True, case_type=CaseType.BBS
    )

    assert result.ok
    stored = store.get(result.case_id)
    assert stored.case_number == "4521 Smith"
    assert stored.tags == ["stage-design", "rush", "bbs"]
    assert audit.texts(result.case_id) == ["Case created"]


def test_repair_case_goes_straight_to_finishing() -> None:
    intake, store, audit = _intake()

    result = intake.create_case("77", Department.DIGITAL, date(2025, 5, 2), needs_repair=True)

    assert store.tags_of(result.case_id) == ["stage-finishing"]
    assert audit.texts(result.case_id) == [
        "Case created and sent directly to Finishing for repair"
    ]


def test_metal_case_has_no_stage_tag() -> None:
    assert initial_tags(Department.METAL, hold=True, needs_repair=True) == ["hold"]


def test_flag_toggles_write_history() -> None:
    case = make_case("1001", tags=["stage-design"])
    intake, store, audit = _intake(case)

    intake.toggle_rush(case)
    intake.toggle_hold(case)
    intake.toggle_rush(case)
    intake.toggle_priority(case)
    intake.toggle_complete(case)

    assert store.tags_of(case.id) == ["stage-design", "hold"]
    stored = store.get(case.id)
    assert stored.priority is True
    assert stored.completed is True
    assert audit.texts(case.id) == [
        "rush added",
        "hold added",
        "rush removed",
        "Priority added",
        "Marked done",
    ]


def test_toggle_complete_twice_undoes() -> None:
    case = make_case("1001")
    intake, store, audit = _intake(case)

    intake.toggle_complete(case)
    intake.toggle_complete(case)

    assert store.get(case.id).completed is False
    assert audit.texts(case.id) == ["Marked done", "Undo done"]


def test_find_duplicates_compares_first_token() -> None:
    original = make_case("4521 Smith")
    other_case = make_case("4521-b")
    closed = make_case("4521 Jones", completed=True)
    archived = make_case("4521", archived=True)
    intake, _, _ = _intake(original, other_case, closed, archived)

    duplicates = intake.find_duplicates("4521 smith crown")

    assert [case.id for case in duplicates] == [original.id]
    assert intake.find_duplicates("4521", exclude_id=original.id) == []
    assert intake.find_duplicates("   ") == []


def test_case_number_key() -> None:
    assert case_number_key("  AB12  Crown prep") == "ab12"
    assert case_number_key("") == ""


def test_update_case_keeps_workflow_tags_and_logs_each_change() -> None:
    tags = ["stage-production", "stage2", "rush", "stats-exclude:production", "remake"]
    case = make_case("1001 Smith", tags=tags, due=date(2025, 3, 10))
    intake, store, audit = _intake(case)

    result = intake.update_case(
        case,
        case_number=" 1002 Smith ",
        department=Department.METAL,
        due=date(2025, 3, 14),
        priority=True,
        rush=False,
        hold=True,
        case_type=CaseType.FLEX,
    )

    assert result.ok
    stored = store.get(case.id)
    assert stored.case_number == "1002 Smith"
    assert stored.department is Department.METAL
    assert stored.due == date(2025, 3, 14)
    assert stored.priority is True
    assert set(stored.tags) == {
        "stage-production",
        "stage2",
        "hold",
        "flex",
        "stats-exclude:production",
        "remake",
    }
    assert audit.texts(case.id) == [
        "rush removed",
        "hold added",
        "flex added",
        "Priority added",
        "Case # changed from 1001 Smith to 1002 Smith",
        "Department changed from Digital to Metal",
        "Due changed from 2025-03-10 to 2025-03-14",
    ]
    assert case.case_number == "1002 Smith"


def test_update_case_without_changes_writes_no_history() -> None:
    case = make_case("1001", tags=["stage-design", "bbs"])
    intake, store, audit = _intake(case)

    result = intake.update_case(case, case_number="1001", case_type=CaseType.BBS)

    assert result.ok
    assert result.audit_text is None
    assert store.tags_of(case.id) == ["stage-design", "bbs"]
    assert audit.texts(case.id) == []


def test_update_case_reports_store_failure() -> None:
    case = make_case("1001", tags=["stage-design"])
    intake, store, audit = _intake(case)
    store.fail_writes.add(case.id)

    result = intake.update_case(case, priority=True)

    assert not result.ok
    assert audit.texts(case.id) == []
