from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

from ..core.enums import ChangeType

logger = logging.getLogger(__name__)

ALL_CHANGES = (ChangeType.INSERT, ChangeType.UPDATE, ChangeType.DELETE)


@dataclass(frozen=True)
class ChangeEvent:
    """A committed change to one row of a table."""

    table: str
    change_type: ChangeType
    customer_id: int
    record_id: Optional[int] = None
    payload: dict = field(default_factory=dict)


ChangeHandler = Callable[[ChangeEvent], Any]


class Subscription:
    def __init__(self, notifier: "ChangeNotifier", table: str, change_types: frozenset, callback: ChangeHandler):
        self._notifier = notifier
        self.table = table
        self.change_types = change_types
        self.callback = callback
        self.active = True

    def matches(self, event: ChangeEvent) -> bool:
        return self.active and event.table == self.table and event.change_type in self.change_types

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self._notifier._remove(self)


class ChangeNotifier:
    """Observer Pattern: services publish committed changes, consumers subscribe per table.

    Delivery is synchronous and in publish order; there is no dedup or
    ordering guarantee across publishers.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: list[Subscription] = []

    def subscribe(self, table: str, change_types: Iterable[ChangeType | str], callback: ChangeHandler) -> Subscription:
        types = frozenset(ChangeType(t) for t in change_types) or frozenset(ALL_CHANGES)
        sub = Subscription(self, table, types, callback)
        with self._lock:
            self._subscriptions.append(sub)
        logger.debug("Subscribed to %s %s", table, sorted(t.value for t in types))
        return sub

    def _remove(self, sub: Subscription) -> None:
        with self._lock:
            if sub in self._subscriptions:
                self._subscriptions.remove(sub)

    def subscriber_count(self, table: Optional[str] = None) -> int:
        with self._lock:
            return sum(1 for s in self._subscriptions if table is None or s.table == table)

    def publish(self, event: ChangeEvent) -> int:
        """Invoke every matching callback once; returns how many were called."""
        with self._lock:
            targets = [s for s in self._subscriptions if s.matches(event)]

        delivered = 0
        for sub in targets:
            try:
                sub.callback(event)
                delivered += 1
            except Exception:
                # Handler errors are logged; remaining handlers still run.
                logger.exception("Change handler failed for %s %s", event.table, event.change_type.value)
        return delivered

    def emit(self, table: str, change_type: ChangeType, *, customer_id: int, record_id: Optional[int] = None, **payload) -> int:
        return self.publish(
            ChangeEvent(table=table, change_type=change_type, customer_id=int(customer_id), record_id=record_id, payload=payload)
        )
