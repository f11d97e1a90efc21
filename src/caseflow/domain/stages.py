"""Derive a case's current stage from its tags and department.

Digital cases may carry several ``stage-*`` tags after concurrent edits. The
precedence below resolves them deterministically; it is data so callers and
tests can inspect the order rather than infer it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from caseflow.domain.model import CaseTags, Department, Stage

if TYPE_CHECKING:
    from caseflow.domain.model import Case

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StageRule:
    stage: Stage
    predicate: Callable[[CaseTags], bool]

    def matches(self, tags: CaseTags) -> bool:
        return self.predicate(tags)


def _has_stage_tag(stage: Stage) -> Callable[[CaseTags], bool]:
    def predicate(tags: CaseTags) -> bool:
        return stage.value in tags.stage_tags

    return predicate


DIGITAL_STAGE_PRECEDENCE: Final[tuple[StageRule, ...]] = tuple(
    StageRule(stage, _has_stage_tag(stage))
    for stage in (Stage.QC, Stage.FINISHING, Stage.PRODUCTION, Stage.DESIGN)
)
DIGITAL_DEFAULT_STAGE: Final[Stage] = Stage.DESIGN


def _as_case_tags(tags: Iterable[str] | CaseTags) -> CaseTags:
    return tags if isinstance(tags, CaseTags) else CaseTags.parse(tags)


def stage_from_tags(tags: Iterable[str] | CaseTags) -> Stage | None:
    """Return the highest-precedence Digital stage named by ``tags``, if any."""

    parsed = _as_case_tags(tags)
    for rule in DIGITAL_STAGE_PRECEDENCE:
        if rule.matches(parsed):
            return rule.stage
    return None


def get_stage(case: Case) -> Stage:
    flags = case.flags
    if case.department == Department.METAL:
        return Stage.FINISHING if flags.stage2 else Stage.DEVELOPMENT

    if len(flags.stage_tags) > 1:
        log.warning(
            "Case %s carries several stage tags %s; resolving by precedence",
            case.id,
            list(flags.stage_tags),
        )

    stage = stage_from_tags(flags)
    if case.department == Department.DIGITAL:
        return stage or DIGITAL_DEFAULT_STAGE

    log.warning(
        "No stage rules for department %s (case %s); falling back to %s",
        case.department,
        case.id,
        stage or Stage.PENDING,
    )
    return stage or Stage.PENDING
