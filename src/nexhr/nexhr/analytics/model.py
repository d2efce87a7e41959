from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class AttendanceCounts:
    present: int = 0
    absent: int = 0
    late: int = 0


@dataclass(frozen=True)
class GenderDistribution:
    male: int = 0
    female: int = 0
    other: int = 0


@dataclass(frozen=True)
class NamedCount:
    name: str
    count: int


@dataclass(frozen=True)
class PayslipSummary:
    total: float = 0.0
    average: float = 0.0
    percentage_change: int = 0


@dataclass(frozen=True)
class DepartmentSalary:
    name: str
    value: float


@dataclass(frozen=True)
class SalaryStats:
    total_employees: int = 0
    total_salary: float = 0.0
    average_salary: float = 0.0
    department_salaries: tuple[DepartmentSalary, ...] = ()


@dataclass(frozen=True)
class RecentHire:
    employee_id: int
    employee_code: str
    full_name: str
    job_title: str | None
    joining_date: str


@dataclass(frozen=True)
class AnalyticsSummary:
    """Derived view over a tenant's rows; recomputed, never persisted."""

    total_employees: int = 0
    active_employees: int = 0
    department_counts: tuple[NamedCount, ...] = ()
    gender_distribution: GenderDistribution = field(default_factory=GenderDistribution)
    attendance_summary: AttendanceCounts = field(default_factory=AttendanceCounts)
    recent_hires: tuple[RecentHire, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
