"""Change feed contract and the in-process fan-out shared by store adapters."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from caseflow.domain.model import Case

log = logging.getLogger(__name__)


class ChangeKind(StrEnum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """One committed change. ``case`` holds the new row and is ``None`` for deletes."""

    kind: ChangeKind
    case_id: str
    case: Case | None = None


type ChangeListener = Callable[[ChangeEvent], None]
type Unsubscribe = Callable[[], None]


@runtime_checkable
class ChangeFeed(Protocol):
    def subscribe(self, listener: ChangeListener) -> Unsubscribe: ...


class ChangeBroadcaster:
    """Deliver change events to every current subscriber, in subscription order."""

    def __init__(self) -> None:
        self._listeners: list[ChangeListener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: ChangeListener) -> Unsubscribe:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: ChangeEvent) -> None:
        with self._lock:
            listeners = tuple(self._listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                # one failing consumer must not starve the others
                log.exception("Change listener failed for %s %s", event.kind, event.case_id)

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)
