from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date, datetime


@dataclass(frozen=True)
class SalaryAllowances:
    basic_salary: float = 0.0
    hra: float = 0.0
    conveyance_allowance: float = 0.0
    medical_allowance: float = 0.0
    special_allowance: float = 0.0
    other_allowances: float = 0.0

    @property
    def gross(self) -> float:
        return float(sum(getattr(self, f.name) for f in fields(self)))


@dataclass(frozen=True)
class SalaryDeductions:
    income_tax: float = 0.0
    provident_fund: float = 0.0
    professional_tax: float = 0.0
    esi: float = 0.0
    loan_deduction: float = 0.0
    other_deductions: float = 0.0

    @property
    def total(self) -> float:
        return float(sum(getattr(self, f.name) for f in fields(self)))


@dataclass(frozen=True)
class SalaryRecord:
    """Salary structure of one employee, active from ``effective_date``."""

    salary_id: int
    customer_id: int
    employee_id: int
    allowances: SalaryAllowances
    deductions: SalaryDeductions
    effective_date: date


@dataclass(frozen=True)
class PayslipRecord:
    """Generated payslip. Immutable; one per (employee, month, year)."""

    payslip_id: int
    customer_id: int
    employee_id: int
    month: int
    year: int
    amount: float
    generated_at: datetime

    @property
    def period(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"
