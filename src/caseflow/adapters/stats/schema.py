"""Pydantic models describing statistics engine payloads."""

from __future__ import annotations

from collections.abc import Mapping
from typing import cast

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _none_to_empty(value: object) -> object:
    return [] if value is None else value


def _none_to_zero(value: object) -> object:
    return 0 if value is None else value


def _legacy_keys(value: object, renames: Mapping[str, str]) -> object:
    """Copy legacy keys onto their current names when the current name is absent."""

    if not isinstance(value, Mapping):
        return value
    data: dict[str, object] = dict(cast(Mapping[str, object], value))
    for legacy, current in renames.items():
        if current not in data and legacy in data:
            data[current] = data[legacy]
    return data


def _preferred_keys(value: object, renames: Mapping[str, str]) -> object:
    """Let a non-empty legacy key win over its current name."""

    if not isinstance(value, Mapping):
        return value
    data: dict[str, object] = dict(cast(Mapping[str, object], value))
    for legacy, current in renames.items():
        if data.get(legacy):
            data[current] = data[legacy]
    return data


class StatsBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CaseDetailPayload(StatsBaseModel):
    id: str
    time_in_stage: float = Field(default=0.0, alias="timeInStage")
    is_active: bool = Field(default=False, alias="isActive")
    is_outlier: bool = Field(default=False, alias="isOutlier")
    tags: list[str] = Field(default_factory=list)
    case_number: str | None = Field(default=None, alias="caseNumber")
    visit_count: int = Field(default=0, alias="visitCount")
    priority: bool = False
    rush: bool = False

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_keys(cls, value: object) -> object:
        return _legacy_keys(value, {"caseId": "id", "modifiers": "tags"})

    _normalize_numbers = field_validator("time_in_stage", "visit_count", mode="before")(
        _none_to_zero
    )
    _normalize_tags = field_validator("tags", mode="before")(_none_to_empty)


class ExcludedCasePayload(StatsBaseModel):
    id: str
    reason: str | None = None
    time_in_stage: float = Field(default=0.0, alias="timeInStage")
    tags: list[str] = Field(default_factory=list)
    case_number: str | None = Field(default=None, alias="caseNumber")
    visit_count: int = Field(default=0, alias="visitCount")
    priority: bool = False
    rush: bool = False

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_keys(cls, value: object) -> object:
        # excluded-case rows carry the case id as caseId; a plain id may be the row id
        preferred = _preferred_keys(value, {"caseId": "id"})
        return _legacy_keys(preferred, {"modifiers": "tags"})

    _normalize_numbers = field_validator("time_in_stage", "visit_count", mode="before")(
        _none_to_zero
    )
    _normalize_tags = field_validator("tags", mode="before")(_none_to_empty)


class StageStatisticsPayload(StatsBaseModel):
    average_time: float = Field(default=0.0, alias="averageTime")
    median_time: float = Field(default=0.0, alias="medianTime")
    case_details: list[CaseDetailPayload] = Field(
        default_factory=list, alias="caseDetails"
    )
    excluded_cases: list[ExcludedCasePayload] = Field(
        default_factory=list, alias="excludedCases"
    )
    no_data: bool = Field(default=False, alias="noData")
    error: str | None = None
    message: str | None = None

    _normalize_lists = field_validator("case_details", "excluded_cases", mode="before")(
        _none_to_empty
    )


class DepartmentEfficiencyPayload(StatsBaseModel):
    score: float | None = None
    no_data: bool = Field(default=False, alias="noData")
    error: str | None = None


StageStatisticsInput = StageStatisticsPayload | Mapping[str, object]
