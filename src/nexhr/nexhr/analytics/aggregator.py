"""Pure aggregation over already-fetched rows.

Nothing here touches the database; every function takes plain sequences
and returns a fresh result. Empty input gives zeroed aggregates.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Iterable, Optional, Sequence

from ..core.constants import RECENT_HIRE_DAYS, RECENT_HIRES_LIMIT, UNASSIGNED_DEPARTMENT
from ..core.enums import AttendanceStatus, Gender
from ..employees.model import Department, Employee
from ..payroll.model import PayslipRecord, SalaryRecord
from .model import (
    AnalyticsSummary,
    AttendanceCounts,
    DepartmentSalary,
    GenderDistribution,
    NamedCount,
    PayslipSummary,
    RecentHire,
    SalaryStats,
)


def _status_of(record) -> Optional[AttendanceStatus]:
    status = record.status
    if isinstance(status, AttendanceStatus):
        return status
    try:
        return AttendanceStatus.parse(status)
    except ValueError:
        return None


def count_attendance(records: Iterable) -> AttendanceCounts:
    present = absent = late = 0
    for r in records:
        status = _status_of(r)
        if status == AttendanceStatus.PRESENT:
            present += 1
        elif status == AttendanceStatus.ABSENT:
            absent += 1
        elif status == AttendanceStatus.LATE:
            late += 1
    return AttendanceCounts(present=present, absent=absent, late=late)


def percentage_change(current: float, previous: float) -> int:
    if previous == 0:
        return 100 if current > 0 else 0
    # Half-up rounding, so 12.5 -> 13 and -2.5 -> -2.
    return int(math.floor((current - previous) / previous * 100 + 0.5))


def summarize_payslips(current: Sequence[PayslipRecord], previous: Sequence[PayslipRecord]) -> PayslipSummary:
    total = float(sum(p.amount for p in current))
    previous_total = float(sum(p.amount for p in previous))
    average = total / len(current) if current else 0.0
    return PayslipSummary(
        total=total,
        average=average,
        percentage_change=percentage_change(total, previous_total),
    )


def department_counts(employees: Iterable[Employee], departments: Iterable[Department]) -> tuple[NamedCount, ...]:
    """Count employees per department in first-seen order (not sorted)."""
    names = {d.department_id: d.department_name for d in departments}
    counts: dict[str, int] = {}
    for emp in employees:
        if emp.department_id is None:
            name = UNASSIGNED_DEPARTMENT
        else:
            name = names.get(emp.department_id, "Unknown")
        counts[name] = counts.get(name, 0) + 1
    return tuple(NamedCount(name=n, count=c) for n, c in counts.items())


def gender_distribution(employees: Iterable[Employee]) -> GenderDistribution:
    male = female = other = 0
    for emp in employees:
        g = (emp.gender or "").strip().lower()
        if g == Gender.MALE.value:
            male += 1
        elif g == Gender.FEMALE.value:
            female += 1
        else:
            other += 1
    return GenderDistribution(male=male, female=female, other=other)


def recent_hires(
    employees: Iterable[Employee],
    *,
    now: datetime,
    days: int = RECENT_HIRE_DAYS,
    limit: int = RECENT_HIRES_LIMIT,
) -> tuple[RecentHire, ...]:
    since = (now - timedelta(days=days)).date()
    out: list[RecentHire] = []
    for emp in employees:
        if len(out) >= limit:
            break
        if emp.joining_date and emp.joining_date >= since:
            out.append(
                RecentHire(
                    employee_id=emp.employee_id,
                    employee_code=emp.employee_code,
                    full_name=emp.full_name,
                    job_title=emp.job_title,
                    joining_date=emp.joining_date.strftime("%Y-%m-%d"),
                )
            )
    return tuple(out)


def salary_stats(
    salaries: Sequence[SalaryRecord],
    employees: Iterable[Employee],
    departments: Iterable[Department],
) -> SalaryStats:
    dept_of = {e.employee_id: e.department_id for e in employees}
    buckets: dict[int, float] = {d.department_id: 0.0 for d in departments}
    names = {d.department_id: d.department_name for d in departments}

    total = 0.0
    for s in salaries:
        gross = s.allowances.gross
        total += gross
        dept_id = dept_of.get(s.employee_id)
        if dept_id in buckets:
            buckets[dept_id] += gross

    return SalaryStats(
        total_employees=len(salaries),
        total_salary=total,
        average_salary=total / len(salaries) if salaries else 0.0,
        department_salaries=tuple(DepartmentSalary(name=names[k], value=v) for k, v in buckets.items()),
    )


def build_summary(
    *,
    employees: Sequence[Employee],
    departments: Sequence[Department],
    attendance: Sequence,
    now: datetime,
) -> AnalyticsSummary:
    return AnalyticsSummary(
        total_employees=len(employees),
        active_employees=sum(1 for e in employees if e.is_active),
        department_counts=department_counts(employees, departments),
        gender_distribution=gender_distribution(employees),
        attendance_summary=count_attendance(attendance),
        recent_hires=recent_hires(employees, now=now),
    )
