"""Decide whether a case is manually excluded from stage statistics.

Only tag-based (manual and legacy) exclusions are visible here. Automatic
exclusions come from the statistics engine's outlier flag and never appear in
tags; the only trace they leave is the inclusion-override reason written when
somebody re-includes such a case.

The rules are an ordered tuple so the precedence can be asserted directly. Note
that the bare legacy ``stats-exclude`` tag carries no stage, so it excludes the
case from every stage.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Final

from caseflow.domain.model import (
    INCLUSION_OVERRIDE_REASON,
    CaseTags,
    ExclusionTags,
    ExclusionType,
)
from caseflow.domain.model.tags import (
    EXCLUDE_ALL_TAG,
    EXCLUDE_TAG,
    legacy_exclusion_tag,
    scoped_exclusion_tag,
)

ALL_SCOPE: Final[str] = "all"

type TagSource = Iterable[str] | CaseTags | ExclusionTags


@dataclass(frozen=True, slots=True)
class ExclusionRule:
    name: str
    predicate: Callable[[ExclusionTags, str | None], bool]

    def matches(self, exclusion: ExclusionTags, stage: str | None) -> bool:
        return self.predicate(exclusion, stage)


def _all_stages(exclusion: ExclusionTags, stage: str | None) -> bool:
    _ = stage
    return exclusion.bare or exclusion.all_stages


def _stage_scoped(exclusion: ExclusionTags, stage: str | None) -> bool:
    return stage is not None and stage in exclusion.scoped


def _legacy_stage(exclusion: ExclusionTags, stage: str | None) -> bool:
    return stage is not None and stage in exclusion.legacy


def _bare_legacy(exclusion: ExclusionTags, stage: str | None) -> bool:
    return (
        stage is not None
        and exclusion.bare
        and not exclusion.all_stages
        and not exclusion.scoped
    )


EXCLUSION_RULES: Final[tuple[ExclusionRule, ...]] = (
    ExclusionRule("all-stages", _all_stages),
    ExclusionRule("stage-scoped", _stage_scoped),
    ExclusionRule("legacy-stage", _legacy_stage),
    ExclusionRule("bare-legacy", _bare_legacy),
)


def exclusion_tags(tags: TagSource) -> ExclusionTags:
    if isinstance(tags, ExclusionTags):
        return tags
    if isinstance(tags, CaseTags):
        return tags.exclusion
    return CaseTags.parse(tags).exclusion


def matching_rule(tags: TagSource, stage: str | None = None) -> ExclusionRule | None:
    """Return the first rule that excludes the case, or ``None``."""

    exclusion = exclusion_tags(tags)
    for rule in EXCLUSION_RULES:
        if rule.matches(exclusion, stage):
            return rule
    return None


def is_excluded(tags: TagSource, stage: str | None = None) -> bool:
    return matching_rule(tags, stage) is not None


def stage_exclusion_tags(stage: str) -> tuple[str, ...]:
    """Tags of which at least one is present on every case excluded from ``stage``."""

    return (EXCLUDE_TAG, EXCLUDE_ALL_TAG, scoped_exclusion_tag(stage), legacy_exclusion_tag(stage))


def get_exclusion_reason(tags: TagSource) -> str | None:
    return exclusion_tags(tags).reason


def classify_manual(tags: TagSource) -> ExclusionType:
    if exclusion_tags(tags).all_stages:
        return ExclusionType.MANUAL_ALL
    return ExclusionType.MANUAL_STAGE


def has_inclusion_override(tags: TagSource) -> bool:
    return INCLUSION_OVERRIDE_REASON in exclusion_tags(tags).reasons


def exclusion_anomalies(tags: TagSource) -> list[str]:
    """Describe ambiguous exclusion states that the rules resolve silently."""

    exclusion = exclusion_tags(tags)
    anomalies: list[str] = []
    if exclusion.bare and exclusion.all_stages:
        anomalies.append("both stats-exclude and stats-exclude:all present")
    if len(exclusion.reasons) > 1:
        anomalies.append(f"{len(exclusion.reasons)} exclusion reasons present")
    if exclusion.reasons and not exclusion.has_signal and not has_inclusion_override(exclusion):
        anomalies.append("exclusion reason without an exclusion tag")
    return anomalies


def exclusion_for_scope(scope: str | None, reason: str | None = None) -> ExclusionTags:
    """Build the exclusion tags a case should carry for ``scope``.

    ``None`` means included, ``"all"`` every stage, anything else one stage.
    """

    reasons = (reason,) if reason else ()
    if scope is None:
        return ExclusionTags()
    if scope == ALL_SCOPE:
        return ExclusionTags(all_stages=True, reasons=reasons)
    return ExclusionTags(scoped=(scope,), reasons=reasons)
