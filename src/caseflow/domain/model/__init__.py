"""Public domain model surface."""

from __future__ import annotations

from caseflow.domain.model.audit import AuditEntry
from caseflow.domain.model.case import UPDATE_SENTINEL, Case, is_update_sentinel, new_id
from caseflow.domain.model.enums import (
    DIGITAL_STAGES,
    METAL_STAGES,
    STAGE_DISPLAY_NAMES,
    CaseType,
    Department,
    ExclusionType,
    Stage,
    UpdatePriority,
    next_stage,
    previous_stage,
)
from caseflow.domain.model.notice import UpdateNotice, parse_update_notice
from caseflow.domain.model.statistics import (
    DepartmentEfficiency,
    ExcludedCaseDetail,
    StageCaseDetail,
    StageStatistics,
)
from caseflow.domain.model.tags import (
    INCLUSION_OVERRIDE_REASON,
    CaseTags,
    ExclusionTags,
)

__all__ = [
    "DIGITAL_STAGES",
    "INCLUSION_OVERRIDE_REASON",
    "METAL_STAGES",
    "STAGE_DISPLAY_NAMES",
    "UPDATE_SENTINEL",
    "AuditEntry",
    "Case",
    "CaseTags",
    "CaseType",
    "Department",
    "DepartmentEfficiency",
    "ExclusionTags",
    "ExclusionType",
    "ExcludedCaseDetail",
    "Stage",
    "StageCaseDetail",
    "StageStatistics",
    "UpdateNotice",
    "UpdatePriority",
    "is_update_sentinel",
    "new_id",
    "next_stage",
    "parse_update_notice",
    "previous_stage",
]
