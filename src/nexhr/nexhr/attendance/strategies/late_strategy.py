from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ..model import AttendanceSettings
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in."""

    def decide_checkin(self, *, check_in: Optional[datetime], work_date: date, now: datetime, settings: AttendanceSettings) -> StatusDecision:
        note = None
        if check_in is not None:
            late_at = settings.late_deadline(work_date)
            minutes = int((check_in - late_at).total_seconds() // 60)
            if minutes > 0:
                note = f"Late by {minutes} min"
        return StatusDecision(status=AttendanceStatus.LATE, note=note)
