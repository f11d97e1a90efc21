"""Helpers for writing case history next to tag mutations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from caseflow.domain.errors import PersistenceError

if TYPE_CHECKING:
    from caseflow.domain.ports import AuditLog

log = logging.getLogger(__name__)


def record_history(audit: AuditLog, case_id: str, text: str) -> str | None:
    """Append ``text`` to the case history; return it, or ``None`` if the write failed.

    Called only after the tag write succeeded. A failed history write is logged
    and does not undo the tag change.
    """

    try:
        audit.record(case_id, text)
    except PersistenceError:
        log.exception("Failed to record history for case %s: %s", case_id, text)
        return None
    return text
