"""Typed view over the flat tag list stored on every case.

Cases persist their workflow state as a list of free-form strings. The rest of
the domain works on :class:`CaseTags`, which is parsed on read and turned back
into the exact wire strings only when a case is written.

Wire vocabulary::

    stage-{design|production|finishing|qc}
    stage2  rush  hold  bbs  flex
    stats-exclude                    bare legacy exclusion (stage agnostic)
    stats-exclude:all
    stats-exclude:<stage>
    stats-exclude-<stage>            legacy stage exclusion
    stats-exclude-reason:<text>

Tags outside the vocabulary are carried through untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Final

from .enums import CaseType

if TYPE_CHECKING:
    from collections.abc import Iterable

STAGE_TAG_PREFIX: Final[str] = "stage-"
STAGE2_TAG: Final[str] = "stage2"
RUSH_TAG: Final[str] = "rush"
HOLD_TAG: Final[str] = "hold"
BBS_TAG: Final[str] = "bbs"
FLEX_TAG: Final[str] = "flex"

EXCLUDE_TAG: Final[str] = "stats-exclude"
EXCLUDE_ALL_TAG: Final[str] = "stats-exclude:all"
EXCLUDE_SCOPED_PREFIX: Final[str] = "stats-exclude:"
EXCLUDE_LEGACY_PREFIX: Final[str] = "stats-exclude-"
EXCLUDE_REASON_PREFIX: Final[str] = "stats-exclude-reason:"

INCLUSION_OVERRIDE_REASON: Final[str] = "Manually included (override automatic exclusion)"


def stage_tag(stage: str) -> str:
    return f"{STAGE_TAG_PREFIX}{stage}"


def scoped_exclusion_tag(stage: str) -> str:
    return f"{EXCLUDE_SCOPED_PREFIX}{stage}"


def legacy_exclusion_tag(stage: str) -> str:
    return f"{EXCLUDE_LEGACY_PREFIX}{stage}"


def reason_tag(reason: str) -> str:
    return f"{EXCLUDE_REASON_PREFIX}{reason}"


def is_exclusion_family(tag: str) -> bool:
    """Return whether ``tag`` belongs to the ``stats-exclude*`` family (reasons included)."""

    return tag.startswith(EXCLUDE_TAG)


def dedupe(tags: Iterable[str]) -> list[str]:
    """Drop repeated tags while keeping first-seen order."""

    return list(dict.fromkeys(tags))


@dataclass(frozen=True, slots=True)
class ExclusionTags:
    """Manual exclusion signals carried in a tag list."""

    bare: bool = False
    all_stages: bool = False
    scoped: tuple[str, ...] = ()
    legacy: tuple[str, ...] = ()
    reasons: tuple[str, ...] = ()

    @property
    def has_signal(self) -> bool:
        """Whether any exclusion tag (reason tags aside) is present."""

        return self.bare or self.all_stages or bool(self.scoped) or bool(self.legacy)

    @property
    def reason(self) -> str | None:
        return self.reasons[0] if self.reasons else None

    def to_tags(self) -> list[str]:
        tags: list[str] = []
        if self.bare:
            tags.append(EXCLUDE_TAG)
        if self.all_stages:
            tags.append(EXCLUDE_ALL_TAG)
        tags.extend(scoped_exclusion_tag(stage) for stage in self.scoped)
        tags.extend(legacy_exclusion_tag(stage) for stage in self.legacy)
        tags.extend(reason_tag(reason) for reason in self.reasons)
        return tags


@dataclass(frozen=True, slots=True)
class CaseTags:
    """Parsed form of a case tag list."""

    stage_tags: tuple[str, ...] = ()
    stage2: bool = False
    rush: bool = False
    hold: bool = False
    bbs: bool = False
    flex: bool = False
    exclusion: ExclusionTags = ExclusionTags()
    extra: tuple[str, ...] = ()

    @classmethod
    def parse(cls, tags: Iterable[str]) -> CaseTags:
        stage_tags: list[str] = []
        flags = dict.fromkeys((STAGE2_TAG, RUSH_TAG, HOLD_TAG, BBS_TAG, FLEX_TAG), False)
        bare = all_stages = False
        scoped: list[str] = []
        legacy: list[str] = []
        reasons: list[str] = []
        extra: list[str] = []

        for tag in dedupe(tags):
            if tag in flags:
                flags[tag] = True
            elif tag.startswith(STAGE_TAG_PREFIX):
                stage_tags.append(tag.removeprefix(STAGE_TAG_PREFIX))
            elif tag == EXCLUDE_TAG:
                bare = True
            elif tag == EXCLUDE_ALL_TAG:
                all_stages = True
            # reason tags share the legacy prefix, so they are matched first
            elif tag.startswith(EXCLUDE_REASON_PREFIX):
                reasons.append(tag.removeprefix(EXCLUDE_REASON_PREFIX))
            elif tag.startswith(EXCLUDE_SCOPED_PREFIX):
                scoped.append(tag.removeprefix(EXCLUDE_SCOPED_PREFIX))
            elif tag.startswith(EXCLUDE_LEGACY_PREFIX):
                legacy.append(tag.removeprefix(EXCLUDE_LEGACY_PREFIX))
            else:
                extra.append(tag)

        return cls(
            stage_tags=tuple(stage_tags),
            stage2=flags[STAGE2_TAG],
            rush=flags[RUSH_TAG],
            hold=flags[HOLD_TAG],
            bbs=flags[BBS_TAG],
            flex=flags[FLEX_TAG],
            exclusion=ExclusionTags(
                bare=bare,
                all_stages=all_stages,
                scoped=tuple(scoped),
                legacy=tuple(legacy),
                reasons=tuple(reasons),
            ),
            extra=tuple(extra),
        )

    def to_tags(self) -> list[str]:
        tags = [stage_tag(stage) for stage in self.stage_tags]
        for enabled, tag in (
            (self.stage2, STAGE2_TAG),
            (self.rush, RUSH_TAG),
            (self.hold, HOLD_TAG),
            (self.bbs, BBS_TAG),
            (self.flex, FLEX_TAG),
        ):
            if enabled:
                tags.append(tag)
        tags.extend(self.exclusion.to_tags())
        tags.extend(self.extra)
        return dedupe(tags)

    @property
    def case_type(self) -> CaseType:
        if self.bbs:
            return CaseType.BBS
        if self.flex:
            return CaseType.FLEX
        return CaseType.GENERAL

    def with_stage(self, stage: str | None) -> CaseTags:
        return replace(self, stage_tags=(stage,) if stage else ())

    def with_exclusion(self, exclusion: ExclusionTags) -> CaseTags:
        return replace(self, exclusion=exclusion)

    def without_exclusions(self) -> CaseTags:
        """Drop the whole ``stats-exclude*`` family, including unrecognised members."""

        return replace(
            self,
            exclusion=ExclusionTags(),
            extra=tuple(tag for tag in self.extra if not is_exclusion_family(tag)),
        )
