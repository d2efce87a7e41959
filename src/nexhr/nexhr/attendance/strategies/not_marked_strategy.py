from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ..model import AttendanceSettings
from .base import AttendanceStrategy, StatusDecision


class NotMarkedStrategy(AttendanceStrategy):
    """No check-in yet and the day is still open."""

    def decide_checkin(self, *, check_in: Optional[datetime], work_date: date, now: datetime, settings: AttendanceSettings) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.NOT_MARKED)
