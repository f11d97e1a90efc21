"""Application-update notices broadcast through sentinel case rows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .enums import UpdatePriority

if TYPE_CHECKING:
    from collections.abc import Iterable

_PRIORITY_VALUES = frozenset(priority.value for priority in UpdatePriority)


@dataclass(frozen=True, slots=True)
class UpdateNotice:
    case_id: str
    priority: UpdatePriority = UpdatePriority.NORMAL
    notes: str = ""


def parse_update_notice(case_id: str, tags: Iterable[str]) -> UpdateNotice:
    """Read ``[priority-level, free-form-notes]`` from a sentinel row's tags.

    The first tag naming a priority level wins; the first other tag is the notes.
    """

    tag_list = list(tags)
    priority = next((tag for tag in tag_list if tag in _PRIORITY_VALUES), UpdatePriority.NORMAL)
    notes = next((tag for tag in tag_list if tag not in _PRIORITY_VALUES), "")
    return UpdateNotice(case_id=case_id, priority=UpdatePriority(priority), notes=notes)
