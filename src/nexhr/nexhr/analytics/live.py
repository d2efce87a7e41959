from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..core.context import TenantContext
from ..realtime.notifier import ALL_CHANGES, ChangeEvent, ChangeNotifier, Subscription
from .model import AnalyticsSummary
from .service import AnalyticsService

logger = logging.getLogger(__name__)

WATCHED_TABLES = {
    "employees": ALL_CHANGES,
    "departments": ALL_CHANGES,
    "attendance_records": ALL_CHANGES,
}


class LiveAnalytics:
    """Keeps a tenant's summary current by recomputing it on every relevant change.

    Each recompute replaces ``latest`` as a whole; with overlapping events the
    last one to finish wins.
    """

    def __init__(
        self,
        service: AnalyticsService,
        notifier: ChangeNotifier,
        ctx: TenantContext,
        *,
        clock: Callable[[], datetime] = now_local,
        on_update: Optional[Callable[[AnalyticsSummary], None]] = None,
    ):
        self._service = service
        self._notifier = notifier
        self._ctx = ctx
        self._clock = clock
        self._on_update = on_update
        self._lock = threading.Lock()
        self._latest: Optional[AnalyticsSummary] = None
        self._computed_on = None
        self._subscriptions: list[Subscription] = []
        self.recomputes = 0

    @property
    def latest(self) -> Optional[AnalyticsSummary]:
        return self._latest

    def current(self) -> AnalyticsSummary:
        """Latest summary, recomputed first when none exists yet or the day has rolled over."""
        latest = self._latest
        if latest is None or self._computed_on != self._clock().date():
            return self.refresh()
        return latest

    def start(self) -> AnalyticsSummary:
        if not self._subscriptions:
            for table, change_types in WATCHED_TABLES.items():
                self._subscriptions.append(self._notifier.subscribe(table, change_types, self._handle))
        return self.refresh()

    def refresh(self) -> AnalyticsSummary:
        now = self._clock()
        summary = self._service.build_summary(self._ctx, now=now)
        with self._lock:
            self._latest = summary
            self._computed_on = now.date()
            self.recomputes += 1
        if self._on_update:
            self._on_update(summary)
        return summary

    def _handle(self, event: ChangeEvent) -> None:
        if event.customer_id != self._ctx.customer_id:
            return
        logger.debug("Recomputing analytics after %s %s", event.table, event.change_type.value)
        self.refresh()

    def close(self) -> None:
        for sub in self._subscriptions:
            sub.unsubscribe()
        self._subscriptions.clear()


class LiveAnalyticsRegistry:
    """One started ``LiveAnalytics`` per tenant, created on first use."""

    def __init__(
        self,
        service: AnalyticsService,
        notifier: ChangeNotifier,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._service = service
        self._notifier = notifier
        self._clock = clock
        self._lock = threading.Lock()
        self._by_tenant: dict[int, LiveAnalytics] = {}

    def for_tenant(self, customer_id: int) -> LiveAnalytics:
        with self._lock:
            live = self._by_tenant.get(int(customer_id))
            if live is None:
                live = LiveAnalytics(
                    self._service, self._notifier, TenantContext(customer_id=int(customer_id)), clock=self._clock
                )
                self._by_tenant[int(customer_id)] = live
                logger.info("Started live analytics for customer %s", customer_id)
                live.start()
        return live

    def summary(self, customer_id: int) -> AnalyticsSummary:
        return self.for_tenant(customer_id).current()

    def close(self) -> None:
        with self._lock:
            for live in self._by_tenant.values():
                live.close()
            self._by_tenant.clear()
