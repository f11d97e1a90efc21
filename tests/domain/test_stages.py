from __future__ import annotations

import logging

import pytest

from caseflow.domain.model import Department, Stage
from caseflow.domain.stages import DIGITAL_STAGE_PRECEDENCE, get_stage, stage_from_tags
from tests.helpers.cases import make_case


def test_precedence_order_is_explicit() -> None:
    assert [rule.stage for rule in DIGITAL_STAGE_PRECEDENCE] == [
        Stage.QC,
        Stage.FINISHING,
        Stage.PRODUCTION,
        Stage.DESIGN,
    ]


def test_digital_stage_from_single_tag() -> None:
    case = make_case(tags=["stage-production", "rush"])

    assert get_stage(case) is Stage.PRODUCTION


def test_digital_case_without_stage_tag_is_in_design() -> None:
    assert get_stage(make_case(tags=["rush"])) is Stage.DESIGN


def test_several_stage_tags_resolve_by_precedence(caplog: pytest.LogCaptureFixture) -> None:
    case = make_case(tags=["stage-design", "stage-qc", "stage-production"])

    with caplog.at_level(logging.WARNING, logger="caseflow.domain.stages"):
        stage = get_stage(case)

    assert stage is Stage.QC
    assert "several stage tags" in caplog.text


@pytest.mark.parametrize(
    ("tags", "expected"),
    [
        (["stage2"], Stage.FINISHING),
        ([], Stage.DEVELOPMENT),
        (["stage-design"], Stage.DEVELOPMENT),
    ],
)
def test_metal_stage_follows_stage2_flag(tags: list[str], expected: Stage) -> None:
    case = make_case(department=Department.METAL, tags=tags)

    assert get_stage(case) is expected


def test_crown_and_bridge_falls_back_to_pending(caplog: pytest.LogCaptureFixture) -> None:
    case = make_case(department=Department.CROWN_AND_BRIDGE)

    with caplog.at_level(logging.WARNING, logger="caseflow.domain.stages"):
        assert get_stage(case) is Stage.PENDING

    assert "No stage rules" in caplog.text


def test_stage_from_tags_without_stage() -> None:
    assert stage_from_tags(["rush"]) is None
