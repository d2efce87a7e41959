from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.constants import DEFAULT_ABSENT_CUTOFF
from .model import AttendanceSettings
from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import AttendanceStrategy, StatusDecision
from .strategies.late_strategy import LateStrategy
from .strategies.not_marked_strategy import NotMarkedStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules.

    With a check-in, the late threshold decides Present vs Late. Without one,
    past days are Absent, and today is Not Marked until ``absent_cutoff``.
    """

    absent_cutoff: time = DEFAULT_ABSENT_CUTOFF

    def for_checkin(
        self,
        *,
        check_in: Optional[datetime],
        work_date: date,
        now: datetime,
        settings: AttendanceSettings,
    ) -> AttendanceStrategy:
        if check_in is not None:
            if check_in <= settings.late_deadline(work_date):
                return PresentStrategy()
            return LateStrategy()

        today = now.date()
        if work_date < today:
            return AbsentStrategy()
        if work_date > today:
            return NotMarkedStrategy()
        if now.time() < self.absent_cutoff:
            return NotMarkedStrategy()
        return AbsentStrategy()

    def derive(
        self,
        *,
        check_in: Optional[datetime],
        work_date: date,
        now: datetime,
        settings: AttendanceSettings,
    ) -> StatusDecision:
        strategy = self.for_checkin(check_in=check_in, work_date=work_date, now=now, settings=settings)
        return strategy.decide_checkin(check_in=check_in, work_date=work_date, now=now, settings=settings)
