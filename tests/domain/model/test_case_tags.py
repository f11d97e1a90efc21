from __future__ import annotations

from caseflow.domain.model import CaseTags, CaseType, ExclusionTags
from caseflow.domain.model.tags import is_exclusion_family


def test_parse_splits_tag_list_into_fields() -> None:
    tags = CaseTags.parse(
        [
            "stage-production",
            "rush",
            "stats-exclude:design",
            "stats-exclude-reason:bad data",
            "custom",
        ]
    )

    assert tags.stage_tags == ("production",)
    assert tags.rush is True
    assert tags.hold is False
    assert tags.exclusion.scoped == ("design",)
    assert tags.exclusion.reasons == ("bad data",)
    assert tags.extra == ("custom",)


def test_reason_tag_is_not_mistaken_for_legacy_exclusion() -> None:
    tags = CaseTags.parse(["stats-exclude-reason:slow scanner"])

    assert tags.exclusion.legacy == ()
    assert tags.exclusion.reason == "slow scanner"
    assert tags.exclusion.has_signal is False


def test_all_tag_is_not_a_scoped_exclusion() -> None:
    tags = CaseTags.parse(["stats-exclude:all", "stats-exclude-qc"])

    assert tags.exclusion.all_stages is True
    assert tags.exclusion.scoped == ()
    assert tags.exclusion.legacy == ("qc",)


def test_to_tags_drops_duplicates() -> None:
    tags = CaseTags.parse(["rush", "stage-design", "rush", "stage-design"])

    assert tags.to_tags() == ["stage-design", "rush"]


def test_round_trip_keeps_unknown_tags() -> None:
    original = ["stage-qc", "hold", "stats-exclude", "legacy-flag"]

    assert set(CaseTags.parse(original).to_tags()) == set(original)


def test_with_stage_replaces_every_stage_tag() -> None:
    tags = CaseTags.parse(["stage-design", "stage-production", "rush"])

    assert tags.with_stage("qc").to_tags() == ["stage-qc", "rush"]
    assert tags.with_stage(None).to_tags() == ["rush"]


def test_without_exclusions_clears_whole_family() -> None:
    tags = CaseTags.parse(
        [
            "rush",
            "stats-exclude",
            "stats-exclude:all",
            "stats-exclude-reason:x",
            "stats-exclude_old",
        ]
    )

    assert tags.without_exclusions().to_tags() == ["rush"]


def test_with_exclusion_serialises_in_canonical_order() -> None:
    exclusion = ExclusionTags(scoped=("design",), reasons=("remake",))

    tags = CaseTags.parse(["stage-design"]).with_exclusion(exclusion)

    assert tags.to_tags() == [
        "stage-design",
        "stats-exclude:design",
        "stats-exclude-reason:remake",
    ]


def test_case_type_prefers_bbs_over_flex() -> None:
    assert CaseTags.parse(["bbs", "flex"]).case_type is CaseType.BBS
    assert CaseTags.parse(["flex"]).case_type is CaseType.FLEX
    assert CaseTags.parse([]).case_type is CaseType.GENERAL


def test_exclusion_family_membership() -> None:
    assert is_exclusion_family("stats-exclude")
    assert is_exclusion_family("stats-exclude-reason:anything")
    assert not is_exclusion_family("rush")
