from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Collection, Iterable, Sequence

from ..core.enums import AttendanceStatus
from ..employees.model import Employee
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, AttendanceSettings

logger = logging.getLogger(__name__)


@dataclass
class DefaultAssignmentPolicy:
    """Fill in a day for employees who have no attendance entry.

    Before the factory's cutoff on the current day the placeholder is
    Not Marked; from the cutoff on, and for every past day, it is Absent.
    Holidays get no placeholders at all.
    """

    factory: AttendanceStrategyFactory = field(default_factory=AttendanceStrategyFactory)

    def status_for_missing(self, *, work_date: date, now: datetime, settings: AttendanceSettings) -> AttendanceStatus:
        return self.factory.derive(check_in=None, work_date=work_date, now=now, settings=settings).status

    def backfill(
        self,
        *,
        employees: Iterable[Employee],
        records: Iterable[AttendanceRecord],
        work_date: date,
        now: datetime,
        settings: AttendanceSettings,
        holidays: Collection[date] = (),
    ) -> Sequence[AttendanceRecord]:
        if work_date in holidays:
            logger.debug("Backfill %s skipped: holiday", work_date)
            return []
        marked = {r.employee_id for r in records if r.work_date == work_date}
        status = self.status_for_missing(work_date=work_date, now=now, settings=settings)

        out: list[AttendanceRecord] = []
        for emp in employees:
            if not emp.is_active or emp.employee_id in marked:
                continue
            out.append(
                AttendanceRecord(
                    attendance_id=None,
                    customer_id=emp.customer_id,
                    employee_id=emp.employee_id,
                    work_date=work_date,
                    check_in_time=None,
                    check_out_time=None,
                    status=status,
                )
            )
        logger.debug("Backfill %s: %s placeholders as %s", work_date, len(out), status.value)
        return out
