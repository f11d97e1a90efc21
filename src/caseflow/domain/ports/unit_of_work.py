"""Transaction boundary over the case repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from caseflow.domain.ports.persistence import AuditEntryRepository, CaseRepository


@runtime_checkable
class RepositoryCollection(Protocol):
    """Repositories that share one session and commit together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Context manager owning a transaction; leaving on an exception rolls it back."""

    @property
    def repositories(self) -> TRepositories: ...

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class CaseRepositories(RepositoryCollection):
    """Repositories required to mutate cases and record their history."""

    cases: CaseRepository
    history: AuditEntryRepository


type CaseUnitOfWork = UnitOfWork[CaseRepositories]
