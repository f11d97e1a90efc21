"""Local cache of live cases kept in step with the store's change feed."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from caseflow.domain.errors import PersistenceError
from caseflow.domain.exclusion import exclusion_anomalies
from caseflow.domain.model import parse_update_notice
from caseflow.domain.ports import CaseFilter, ChangeKind

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from caseflow.domain.model import Case, Department, UpdateNotice
    from caseflow.domain.ports import CaseStore, ChangeEvent, Unsubscribe

log = logging.getLogger(__name__)

type UpdateNoticeHandler = Callable[[UpdateNotice], None]


def _log_tag_anomalies(case: Case) -> None:
    stage_tags = case.flags.stage_tags
    if len(stage_tags) > 1:
        log.warning(
            "Case %s (%s) carries several stage tags: %s",
            case.case_number,
            case.id,
            ", ".join(stage_tags),
        )
    for anomaly in exclusion_anomalies(case.tags):
        log.warning("Case %s (%s): %s", case.case_number, case.id, anomaly)


class CaseSync:
    """Live view of non-archived cases.

    Sentinel ``update`` rows never enter the view: they are turned into
    :class:`UpdateNotice` values for ``on_update_notice`` and deleted from the
    store; only the most recent notice is kept as ``latest_notice``. Archived
    rows are dropped before that check. Callers that mutate exclusions call
    :meth:`refresh` afterwards so the view reflects the store rather than a local
    guess.
    """

    def __init__(
        self,
        store: CaseStore,
        *,
        on_update_notice: UpdateNoticeHandler | None = None,
    ) -> None:
        self._store = store
        self._on_update_notice = on_update_notice
        self._cache: dict[str, Case] = {}
        self._lock = threading.RLock()
        self._unsubscribe: Unsubscribe | None = None
        self.latest_notice: UpdateNotice | None = None

    @property
    def started(self) -> bool:
        return self._unsubscribe is not None

    def start(self) -> None:
        if self._unsubscribe is not None:
            return
        self.load()
        self._unsubscribe = self._store.subscribe(self.handle_change)

    def stop(self) -> None:
        if self._unsubscribe is None:
            return
        self._unsubscribe()
        self._unsubscribe = None

    def load(self) -> None:
        """Replace the cache with a full query of non-archived cases."""

        fetched = self._store.query(CaseFilter(archived=False))
        live: dict[str, Case] = {}
        for case in self._divert_sentinels(fetched):
            _log_tag_anomalies(case)
            live[case.id] = case
        with self._lock:
            self._cache = live
        log.debug("Loaded %d live cases", len(live))

    def refresh(self) -> None:
        self.load()

    def handle_change(self, event: ChangeEvent) -> None:
        if event.kind is ChangeKind.DELETE or event.case is None:
            with self._lock:
                self._cache.pop(event.case_id, None)
            return

        case = event.case
        if case.archived:
            with self._lock:
                self._cache.pop(case.id, None)
            return
        if case.is_update_sentinel:
            self._divert(case)
            return
        with self._lock:
            self._cache[case.id] = case

    def cases(self, department: Department | None = None) -> list[Case]:
        with self._lock:
            snapshot = list(self._cache.values())
        if department is not None:
            snapshot = [case for case in snapshot if case.department == department]
        return sorted(snapshot, key=lambda case: (case.due, case.created_at))

    def get(self, case_id: str) -> Case | None:
        with self._lock:
            return self._cache.get(case_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def _divert_sentinels(self, cases: Iterable[Case]) -> list[Case]:
        kept: list[Case] = []
        for case in cases:
            if case.is_update_sentinel:
                self._divert(case)
            else:
                kept.append(case)
        return kept

    def _divert(self, case: Case) -> None:
        notice = parse_update_notice(case.id, case.tags)
        log.info("Received update notice %s (%s)", notice.case_id, notice.priority)
        self.latest_notice = notice
        if self._on_update_notice is not None:
            self._on_update_notice(notice)
        try:
            self._store.delete(case.id)
        except PersistenceError:
            log.exception("Failed to delete update notice row %s", case.id)
        with self._lock:
            self._cache.pop(case.id, None)
