"""Case aggregate: a manufactured work order moving through the workflow."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Final
from uuid import uuid4

from .enums import CaseType, Department
from .tags import CaseTags

UPDATE_SENTINEL: Final[str] = "update"


def new_id() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def is_update_sentinel(case_number: str | None) -> bool:
    """Return whether ``case_number`` marks an application-update notice rather than a case."""

    if case_number is None:
        return False
    return case_number.strip().lower() == UPDATE_SENTINEL


@dataclass(eq=False, kw_only=True)
class Case:
    """A work order. Workflow state lives in ``tags``; see :mod:`.tags`."""

    case_number: str
    department: Department
    due: date
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=_utcnow)
    priority: bool = False
    completed: bool = False
    archived: bool = False
    archived_at: datetime | None = None
    tags: list[str] = field(default_factory=list[str])

    @property
    def flags(self) -> CaseTags:
        return CaseTags.parse(self.tags)

    @property
    def rush(self) -> bool:
        return self.flags.rush

    @property
    def hold(self) -> bool:
        return self.flags.hold

    @property
    def stage2(self) -> bool:
        return self.flags.stage2

    @property
    def case_type(self) -> CaseType:
        return self.flags.case_type

    @property
    def is_update_sentinel(self) -> bool:
        return is_update_sentinel(self.case_number)
