from __future__ import annotations

import pytest

from caseflow.domain.exclusion import (
    EXCLUSION_RULES,
    classify_manual,
    exclusion_anomalies,
    get_exclusion_reason,
    has_inclusion_override,
    is_excluded,
    matching_rule,
    stage_exclusion_tags,
)
from caseflow.domain.model import INCLUSION_OVERRIDE_REASON, ExclusionType


def test_rule_order_is_explicit() -> None:
    assert [rule.name for rule in EXCLUSION_RULES] == [
        "all-stages",
        "stage-scoped",
        "legacy-stage",
        "bare-legacy",
    ]


@pytest.mark.parametrize("stage", ["design", "production", "finishing", "qc"])
def test_bare_legacy_tag_excludes_every_stage(stage: str) -> None:
    assert is_excluded(["stats-exclude"], stage)


def test_all_tag_excludes_every_stage() -> None:
    tags = ["stats-exclude:all"]

    assert is_excluded(tags, "design")
    assert is_excluded(tags, "qc")
    assert matching_rule(tags, "qc") is EXCLUSION_RULES[0]


def test_scoped_tag_only_excludes_its_stage() -> None:
    tags = ["stage-production", "stats-exclude:production"]

    assert is_excluded(tags, "production")
    assert not is_excluded(tags, "design")


def test_legacy_stage_tag_only_excludes_its_stage() -> None:
    tags = ["stats-exclude-finishing"]

    assert is_excluded(tags, "finishing")
    assert not is_excluded(tags, "production")
    assert matching_rule(tags, "finishing") is EXCLUSION_RULES[2]


def test_reason_tag_alone_does_not_exclude() -> None:
    assert not is_excluded(["stats-exclude-reason:bad scan"], "design")


def test_without_stage_only_the_all_stages_rule_applies() -> None:
    assert is_excluded(["stats-exclude"])
    assert not is_excluded(["stats-exclude:design"])


def test_reason_and_classification() -> None:
    tags = ["stats-exclude:all", "stats-exclude-reason:remake"]

    assert get_exclusion_reason(tags) == "remake"
    assert classify_manual(tags) is ExclusionType.MANUAL_ALL
    assert classify_manual(["stats-exclude:qc"]) is ExclusionType.MANUAL_STAGE
    assert get_exclusion_reason(["stats-exclude"]) is None


def test_inclusion_override_detection() -> None:
    tags = [f"stats-exclude-reason:{INCLUSION_OVERRIDE_REASON}"]

    assert has_inclusion_override(tags)
    assert not is_excluded(tags, "design")
    assert exclusion_anomalies(tags) == []


def test_anomalies_report_ambiguous_states() -> None:
    anomalies = exclusion_anomalies(
        ["stats-exclude", "stats-exclude:all", "stats-exclude-reason:a", "stats-exclude-reason:b"]
    )

    assert "both stats-exclude and stats-exclude:all present" in anomalies
    assert "2 exclusion reasons present" in anomalies
    assert exclusion_anomalies(["stats-exclude-reason:orphan"]) == [
        "exclusion reason without an exclusion tag"
    ]


@pytest.mark.parametrize(
    "tags",
    [
        ["stats-exclude"],
        ["stats-exclude:all"],
        ["stats-exclude:qc", "stats-exclude-reason:remake"],
        ["stage-qc", "stats-exclude-qc"],
    ],
)
def test_stage_exclusion_tags_cover_every_excluding_tag(tags: list[str]) -> None:
    prefilter = stage_exclusion_tags("qc")

    assert is_excluded(tags, "qc")
    assert any(tag in prefilter for tag in tags)


def test_stage_exclusion_tags_skip_other_stages() -> None:
    prefilter = stage_exclusion_tags("qc")

    assert "stats-exclude:design" not in prefilter
    assert "stats-exclude-design" not in prefilter
