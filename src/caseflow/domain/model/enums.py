"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum
from typing import Final


class Department(StrEnum):
    DIGITAL = "Digital"
    METAL = "Metal"
    CROWN_AND_BRIDGE = "C&B"


class Stage(StrEnum):
    DESIGN = "design"
    PRODUCTION = "production"
    FINISHING = "finishing"
    QC = "qc"
    DEVELOPMENT = "development"
    # not a workflow stage; returned when a department has no stage rules
    PENDING = "pending"

    @property
    def display_name(self) -> str:
        return STAGE_DISPLAY_NAMES[self]


STAGE_DISPLAY_NAMES: Final[dict[Stage, str]] = {
    Stage.DESIGN: "Design",
    Stage.PRODUCTION: "Production",
    Stage.FINISHING: "Finishing",
    Stage.QC: "Quality Control",
    Stage.DEVELOPMENT: "Development",
    Stage.PENDING: "Pending",
}

DIGITAL_STAGES: Final[tuple[Stage, ...]] = (
    Stage.DESIGN,
    Stage.PRODUCTION,
    Stage.FINISHING,
    Stage.QC,
)

METAL_STAGES: Final[tuple[Stage, ...]] = (Stage.DEVELOPMENT, Stage.FINISHING)


class CaseType(StrEnum):
    GENERAL = "general"
    BBS = "bbs"
    FLEX = "flex"


class ExclusionType(StrEnum):
    """How a case ended up outside the stage statistics."""

    MANUAL_ALL = "manual-all"
    MANUAL_STAGE = "manual-stage"
    AUTOMATIC = "automatic"
    AUTOMATIC_OUTLIER = "automatic-outlier"

    @property
    def is_manual(self) -> bool:
        return self in {ExclusionType.MANUAL_ALL, ExclusionType.MANUAL_STAGE}

    @property
    def is_automatic(self) -> bool:
        return not self.is_manual


class UpdatePriority(StrEnum):
    NORMAL = "normal"
    HIGH = "high"
    FORCE = "force"


def next_stage(current: Stage) -> Stage | None:
    """Return the Digital stage after ``current`` (``None`` once in QC)."""

    if current not in DIGITAL_STAGES:
        return None
    index = DIGITAL_STAGES.index(current)
    return DIGITAL_STAGES[index + 1] if index < len(DIGITAL_STAGES) - 1 else None


def previous_stage(current: Stage) -> Stage | None:
    if current not in DIGITAL_STAGES:
        return None
    index = DIGITAL_STAGES.index(current)
    return DIGITAL_STAGES[index - 1] if index > 0 else None
