"""Engine lifecycle for the case database and the unit of work built on it.

``startup()`` must run once per process before any store or unit of work is
created. It maps the domain classes, migrates the schema to head and keeps the
engine in module state; ``shutdown()`` disposes it again.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from caseflow.adapters.sqlalchemy.mappings import start_mappers
from caseflow.adapters.sqlalchemy.migrations import upgrade_head
from caseflow.adapters.sqlalchemy.repositories import (
    SqlAlchemyAuditEntryRepository,
    SqlAlchemyCaseRepository,
)
from caseflow.config import get_database_config
from caseflow.domain.ports import CaseRepositories, RepositoryCollection

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the case database is used before ``startup()`` or started twice."""


@dataclass(slots=True)
class _AdapterState:
    engine: Engine | None = None
    session_factory: sessionmaker[Session] | None = None

    def bind(self, engine: Engine) -> None:
        self.engine = engine
        self.session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    def clear(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self.session_factory = None

    def require_session_factory(self) -> sessionmaker[Session]:
        if self.session_factory is None:
            raise StartupError("Case database not started; call startup() first")
        return self.session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the case database, migrating it to the latest revision.

    ``engine`` wins over ``database_uri``, which wins over ``DATABASE_URI``.
    Starting an already started adapter needs ``force=True``; the previous
    engine is kept open because callers may still hold it.
    """

    if _STATE.engine is not None and not force:
        raise StartupError("Case database already started; pass force=True to rebind")

    bound = engine or create_engine(database_uri or get_database_config().uri, future=True)
    start_mappers()
    upgrade_head(engine=bound)
    _STATE.bind(bound)
    log.info("Case database ready at %s", bound.url.render_as_string(hide_password=True))


def configured_engine() -> Engine | None:
    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the engine; a no-op when nothing was started."""

    _STATE.clear()


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """One session per ``with`` block; rolled back when the block raises.

    Nothing is committed implicitly. Callers commit inside the block.
    """

    def __init__(self) -> None:
        self._session_factory = _STATE.require_session_factory()
        self._session: Session | None = None
        self._repositories: TRepositories | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        self._session = self._session_factory()
        self._repositories = self._build_repositories(self._session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not open")
        return self._session

    @property
    def repositories(self) -> TRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work is not open")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SqlAlchemyCaseUnitOfWork(BaseSqlAlchemyUnitOfWork[CaseRepositories]):
    def _build_repositories(self, session: Session) -> CaseRepositories:
        return CaseRepositories(
            cases=SqlAlchemyCaseRepository(session),
            history=SqlAlchemyAuditEntryRepository(session),
        )


if TYPE_CHECKING:
    from caseflow.domain.ports import CaseUnitOfWork

    _uow_check: CaseUnitOfWork = SqlAlchemyCaseUnitOfWork()
