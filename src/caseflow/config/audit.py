"""Audit trail defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final

DEFAULT_AUDIT_USER: Final[str] = "Unknown"


@dataclass(frozen=True, slots=True)
class AuditConfig:
    user_name: str = DEFAULT_AUDIT_USER


def get_audit_config() -> AuditConfig:
    user_name = os.getenv("CASEFLOW_USER_NAME")
    if user_name is None or not user_name.strip():
        return AuditConfig()
    return AuditConfig(user_name=user_name.strip())
