"""Domain error hierarchy."""

from __future__ import annotations


class CaseflowError(Exception):
    """Base class for domain errors."""


class PersistenceError(CaseflowError):
    """Raised by store adapters when a read or write could not be completed."""


class CaseNotFoundError(PersistenceError):
    """Raised when a case id does not resolve to a stored case."""

    def __init__(self, case_id: str) -> None:
        super().__init__(f"Case not found: {case_id}")
        self.case_id = case_id


class WorkflowError(CaseflowError):
    """Raised when an operation does not apply to a case."""
