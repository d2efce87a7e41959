from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from ..common.datetime_utils import format_duration
from ..core.constants import DEFAULT_LATE_THRESHOLD_MINUTES, DEFAULT_WORK_START
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's attendance for one day."""

    attendance_id: Optional[int]
    customer_id: int
    employee_id: int
    work_date: date
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime]
    status: AttendanceStatus
    notes: Optional[str] = None
    selfie_path: Optional[str] = None

    @property
    def worked_minutes(self) -> int:
        if not self.check_in_time or not self.check_out_time:
            return 0
        return max(int((self.check_out_time - self.check_in_time).total_seconds() // 60), 0)

    @property
    def work_hours(self) -> str:
        if not self.check_in_time or not self.check_out_time:
            return "-"
        return format_duration(self.worked_minutes)


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model for listings and exports (joined with employee)."""

    attendance_id: int
    employee_id: int
    employee_code: str
    employee_name: str
    job_title: Optional[str]
    work_date: date
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime]
    status: AttendanceStatus
    notes: Optional[str] = None
    selfie_path: Optional[str] = None


@dataclass(frozen=True)
class AttendanceSettings:
    """Per-tenant attendance rules. Missing row means these defaults."""

    customer_id: int
    work_start_time: time = DEFAULT_WORK_START
    late_threshold_minutes: Optional[int] = DEFAULT_LATE_THRESHOLD_MINUTES
    geofencing_enabled: bool = True
    photo_verification_enabled: bool = True

    def late_deadline(self, work_date: date) -> datetime:
        """Latest check-in on ``work_date`` that still counts as on time.

        May fall on the next calendar day when the shift starts late in the evening.
        """
        minutes = self.late_threshold_minutes
        if minutes is None:
            minutes = DEFAULT_LATE_THRESHOLD_MINUTES
        return datetime.combine(work_date, self.work_start_time) + timedelta(minutes=int(minutes))

