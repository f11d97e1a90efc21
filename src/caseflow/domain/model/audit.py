"""Append-only case history."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from .case import new_id


@dataclass(eq=False, kw_only=True)
class AuditEntry:
    """One line of case history. Never mutated once written."""

    case_id: str
    text: str
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    user_name: str | None = None
