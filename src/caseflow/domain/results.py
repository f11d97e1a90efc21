"""Outcome types returned by mutating domain services."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class MutationResult:
    """Outcome of a single tag write.

    Failures are values, not exceptions: the service logged the cause already and
    nothing was retried.
    """

    case_id: str
    ok: bool
    tags: tuple[str, ...] = ()
    audit_text: str | None = None
    error: Exception | None = None

    @classmethod
    def success(
        cls, case_id: str, tags: list[str] | tuple[str, ...], audit_text: str | None = None
    ) -> MutationResult:
        return cls(case_id=case_id, ok=True, tags=tuple(tags), audit_text=audit_text)

    @classmethod
    def failure(cls, case_id: str, error: Exception) -> MutationResult:
        return cls(case_id=case_id, ok=False, error=error)


@dataclass(frozen=True, slots=True)
class BatchItemResult:
    case_id: str
    ok: bool
    error: Exception | None = None


@dataclass(slots=True)
class ResetReport:
    """Summary of a best-effort batch reset."""

    scanned: int = 0
    updated: int = 0
    failed: list[BatchItemResult] = field(default_factory=list[BatchItemResult])
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and not self.failed
