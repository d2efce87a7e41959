from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..core.context import TenantContext
from ..employees.repository import DepartmentRepository, EmployeeRepository
from .aggregator import build_summary
from .model import AnalyticsSummary

logger = logging.getLogger(__name__)


class AnalyticsService:
    """Dashboard figures for one tenant, computed from its current rows."""

    def __init__(
        self,
        employees: EmployeeRepository,
        departments: DepartmentRepository,
        attendance: AttendanceRepository,
    ):
        self._employees = employees
        self._departments = departments
        self._attendance = attendance

    def build_summary(self, ctx: TenantContext, *, now: Optional[datetime] = None) -> AnalyticsSummary:
        now = now or now_local()
        employees = list(self._employees.list_all(ctx.customer_id))
        departments = list(self._departments.list_all(ctx.customer_id))
        attendance = list(self._attendance.list_for_date(ctx.customer_id, now.date()))

        summary = build_summary(employees=employees, departments=departments, attendance=attendance, now=now)
        logger.debug(
            "Summary for customer %s: %s employees, %s attendance rows",
            ctx.customer_id,
            summary.total_employees,
            len(attendance),
        )
        return summary
