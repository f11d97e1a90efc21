"""Statistics exclusion: policy, manual toggles, reconciliation and bulk reset."""

from __future__ import annotations

from .policy import (
    ALL_SCOPE,
    EXCLUSION_RULES,
    ExclusionRule,
    classify_manual,
    exclusion_anomalies,
    get_exclusion_reason,
    has_inclusion_override,
    is_excluded,
    matching_rule,
    stage_exclusion_tags,
)
from .reconcile import (
    ReconciledCase,
    ReconciledView,
    collect_manual_exclusions,
    format_duration,
    reconcile_stage_cases,
    reconcile_stage_statistics,
)
from .reset import BatchResetService, ResetScope, reset_all_tags, reset_stage_tags
from .service import ExclusionService

__all__ = [
    "ALL_SCOPE",
    "EXCLUSION_RULES",
    "BatchResetService",
    "ExclusionRule",
    "ExclusionService",
    "ReconciledCase",
    "ReconciledView",
    "ResetScope",
    "classify_manual",
    "collect_manual_exclusions",
    "exclusion_anomalies",
    "format_duration",
    "get_exclusion_reason",
    "has_inclusion_override",
    "is_excluded",
    "matching_rule",
    "reconcile_stage_cases",
    "reconcile_stage_statistics",
    "reset_all_tags",
    "reset_stage_tags",
    "stage_exclusion_tags",
]
