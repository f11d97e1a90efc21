from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import text

from caseflow.adapters.sqlalchemy import SqlAlchemyAuditLog, SqlAlchemyCaseStore
from caseflow.domain.errors import CaseNotFoundError
from caseflow.domain.model import Department
from caseflow.domain.ports import CaseFilter, ChangeEvent, ChangeKind
from tests.helpers.cases import make_case

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.engine import Engine

    from caseflow.adapters.sqlalchemy import SqlAlchemyCaseUnitOfWork


@pytest.fixture
def store(sqlite_unit_of_work: Callable[[], SqlAlchemyCaseUnitOfWork]) -> SqlAlchemyCaseStore:
    return SqlAlchemyCaseStore(sqlite_unit_of_work)


@pytest.fixture
def audit(sqlite_unit_of_work: Callable[[], SqlAlchemyCaseUnitOfWork]) -> SqlAlchemyAuditLog:
    return SqlAlchemyAuditLog(sqlite_unit_of_work, user_name="Dana")


def test_add_and_get_round_trip(store: SqlAlchemyCaseStore) -> None:
    case = make_case("5001", tags=["stage-qc", "rush"], due=date(2025, 6, 1))

    store.add(case)
    loaded = store.get(case.id)

    assert loaded is not case
    assert loaded.case_number == "5001"
    assert loaded.department is Department.DIGITAL
    assert loaded.tags == ["stage-qc", "rush"]
    assert loaded.due == date(2025, 6, 1)
    assert loaded.created_at == case.created_at


def test_digital_department_is_stored_under_legacy_name(
    store: SqlAlchemyCaseStore, sqlite_engine: Engine
) -> None:
    case = store.add(make_case("5002"))

    with sqlite_engine.connect() as connection:
        row = connection.execute(
            text("SELECT department, modifiers FROM cases WHERE id = :id"), {"id": case.id}
        ).one()

    assert row.department == "General"
    assert row.modifiers == "[]"


@pytest.mark.parametrize("stored", ["not json{", '{"a": 1}'])
def test_unreadable_tag_column_loads_as_no_tags(
    store: SqlAlchemyCaseStore, sqlite_engine: Engine, stored: str
) -> None:
    case = store.add(make_case("5003", tags=["stage-qc"]))
    with sqlite_engine.begin() as connection:
        connection.execute(
            text("UPDATE cases SET modifiers = :tags WHERE id = :id"),
            {"tags": stored, "id": case.id},
        )

    assert store.get(case.id).tags == []


def test_get_missing_case_raises(store: SqlAlchemyCaseStore) -> None:
    with pytest.raises(CaseNotFoundError):
        store.get("missing")


def test_update_replaces_tags_wholesale(store: SqlAlchemyCaseStore) -> None:
    case = store.add(make_case("5003", tags=["stage-design", "hold"]))

    updated = store.update(case.id, tags=["stage-production"], priority=True)

    assert updated.tags == ["stage-production"]
    assert store.get(case.id).tags == ["stage-production"]
    assert store.get(case.id).priority is True


def test_update_edits_case_details(store: SqlAlchemyCaseStore) -> None:
    case = store.add(make_case("5005", tags=["stage-qc"]))

    store.update(
        case.id, case_number="5006", department=Department.CROWN_AND_BRIDGE, due=date(2025, 6, 1)
    )

    stored = store.get(case.id)
    assert stored.case_number == "5006"
    assert stored.department == Department.CROWN_AND_BRIDGE
    assert stored.due == date(2025, 6, 1)
    assert stored.tags == ["stage-qc"]


def test_archiving_sets_timestamp(store: SqlAlchemyCaseStore) -> None:
    case = store.add(make_case("5004"))

    archived = store.update(case.id, archived=True)

    assert archived.archived is True
    assert archived.archived_at is not None
    assert store.update(case.id, archived=False).archived_at is None


def test_query_filters_and_orders(store: SqlAlchemyCaseStore) -> None:
    late = store.add(make_case("6001 Late", due=date(2025, 7, 1), tags=["rush"]))
    early = store.add(make_case("6002 Early", due=date(2025, 6, 1)))
    store.add(make_case("6003", department=Department.METAL, due=date(2025, 6, 15)))
    store.add(make_case("6004", archived=True))

    live = store.query()
    digital = store.query(CaseFilter(department=Department.DIGITAL))
    rush = store.query(CaseFilter(any_tags=("rush",)))
    every = store.query(CaseFilter(archived=None))

    assert [case.case_number for case in live] == ["6002 Early", "6003", "6001 Late"]
    assert [case.id for case in digital] == [early.id, late.id]
    assert [case.id for case in rush] == [late.id]
    assert len(every) == 4


def test_delete_removes_case_and_history(
    store: SqlAlchemyCaseStore, audit: SqlAlchemyAuditLog
) -> None:
    case = store.add(make_case("update", tags=["normal", "notes"]))
    audit.record(case.id, "Case created")

    store.delete(case.id)
    store.delete(case.id)

    with pytest.raises(CaseNotFoundError):
        store.get(case.id)
    assert audit.history(case.id) == []


def test_changes_are_published_after_commit(store: SqlAlchemyCaseStore) -> None:
    events: list[ChangeEvent] = []
    unsubscribe = store.subscribe(events.append)

    case = store.add(make_case("7001"))
    store.update(case.id, tags=["stage-design"])
    store.delete(case.id)
    unsubscribe()
    store.add(make_case("7002"))

    assert [event.kind for event in events] == [
        ChangeKind.INSERT,
        ChangeKind.UPDATE,
        ChangeKind.DELETE,
    ]
    update_event = events[1]
    assert update_event.case is not None
    assert update_event.case.tags == ["stage-design"]
    assert events[2].case is None


def test_audit_log_keeps_entries_in_order(
    store: SqlAlchemyCaseStore, audit: SqlAlchemyAuditLog
) -> None:
    case = store.add(make_case("8001"))

    audit.record(case.id, "Case created")
    audit.record(case.id, "rush added")

    history = audit.history(case.id)
    assert [entry.text for entry in history] == ["Case created", "rush added"]
    assert {entry.user_name for entry in history} == {"Dana"}
