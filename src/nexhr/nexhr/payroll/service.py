from __future__ import annotations

import calendar
import logging
from dataclasses import fields
from datetime import date, datetime
from typing import Mapping, Optional, Sequence, Union

from ..analytics.aggregator import salary_stats, summarize_payslips
from ..analytics.model import PayslipSummary, SalaryStats
from ..common.datetime_utils import now_local, previous_month
from ..common.validators import require_month, require_non_negative
from ..core.context import TenantContext
from ..core.enums import ChangeType
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import DepartmentRepository, EmployeeRepository
from ..realtime.notifier import ChangeNotifier
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import PayslipRecord, SalaryAllowances, SalaryDeductions, SalaryRecord
from .repository import PayslipRepository, SalaryRepository

logger = logging.getLogger(__name__)

AllowancesInput = Union[SalaryAllowances, Mapping[str, object]]
DeductionsInput = Union[SalaryDeductions, Mapping[str, object]]


def _build(cls, value):
    """Validate a breakdown given as a dataclass or a plain mapping."""
    if isinstance(value, cls):
        value = {f.name: getattr(value, f.name) for f in fields(cls)}
    value = dict(value or {})
    names = {f.name for f in fields(cls)}
    unknown = set(value) - names
    if unknown:
        raise ValidationError(f"Unknown salary fields: {', '.join(sorted(unknown))}")
    return cls(**{k: require_non_negative(v, k) for k, v in value.items()})


def _period_end(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


class PayrollService:
    """Use case: salary structures, payslip generation and payroll statistics."""

    def __init__(
        self,
        salaries: SalaryRepository,
        payslips: PayslipRepository,
        employees: EmployeeRepository,
        departments: DepartmentRepository,
        *,
        calculator: Optional[PayrollCalculator] = None,
        notifier: Optional[ChangeNotifier] = None,
    ):
        self._salaries = salaries
        self._payslips = payslips
        self._employees = employees
        self._departments = departments
        self._calculator = calculator or StandardPayrollCalculator()
        self._notifier = notifier

    def _require_employee(self, ctx: TenantContext, employee_id: int):
        emp = self._employees.get_by_id(ctx.customer_id, int(employee_id))
        if not emp:
            raise NotFoundError("Employee not found")
        return emp

    def upsert_salary(
        self,
        ctx: TenantContext,
        *,
        employee_id: int,
        allowances: AllowancesInput,
        deductions: DeductionsInput,
        effective_date: Optional[date] = None,
    ) -> int:
        self._require_employee(ctx, employee_id)
        allowances = _build(SalaryAllowances, allowances)
        deductions = _build(SalaryDeductions, deductions)
        effective_date = effective_date or now_local().date()

        salary_id = self._salaries.upsert(
            customer_id=ctx.customer_id,
            employee_id=int(employee_id),
            allowances=allowances,
            deductions=deductions,
            effective_date=effective_date,
        )
        logger.info("Salary %s saved for employee %s effective %s", salary_id, employee_id, effective_date)
        if self._notifier:
            self._notifier.emit("salaries", ChangeType.UPDATE, customer_id=ctx.customer_id, record_id=salary_id)
        return salary_id

    def get_salary(self, ctx: TenantContext, employee_id: int, *, on_date: Optional[date] = None) -> SalaryRecord:
        salary = self._salaries.get_active(ctx.customer_id, int(employee_id), on_date or now_local().date())
        if not salary:
            raise NotFoundError("No salary record for this employee")
        return salary

    def list_salaries(self, ctx: TenantContext, *, on_date: Optional[date] = None) -> list[dict]:
        salaries = self._salaries.list_active(ctx.customer_id, on_date or now_local().date())
        employees = {e.employee_id: e for e in self._employees.list_all(ctx.customer_id)}
        departments = {d.department_id: d.department_name for d in self._departments.list_all(ctx.customer_id)}

        rows: list[dict] = []
        for s in salaries:
            emp = employees.get(s.employee_id)
            rows.append(
                {
                    "salary_id": s.salary_id,
                    "employee_id": s.employee_id,
                    "employee_name": emp.full_name if emp else "",
                    "position": (emp.job_title if emp else None) or "Employee",
                    "department": departments.get(emp.department_id) if emp else None,
                    "gross": s.allowances.gross,
                    "deductions": s.deductions.total,
                    "net": self._calculator.net_pay(s),
                    "effective_date": s.effective_date.strftime("%Y-%m-%d"),
                }
            )
        return rows

    def generate_payslip(
        self,
        ctx: TenantContext,
        *,
        employee_id: int,
        year: int,
        month: int,
        amount: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> PayslipRecord:
        now = now or now_local()
        month = require_month(month)
        year = int(year)
        self._require_employee(ctx, employee_id)

        if self._payslips.get_for_period(ctx.customer_id, int(employee_id), year=year, month=month):
            raise ValidationError(f"A payslip for {year:04d}-{month:02d} already exists")

        if amount is None:
            salary = self._salaries.get_active(ctx.customer_id, int(employee_id), _period_end(year, month))
            if not salary:
                raise ValidationError("No salary record active for this period")
            amount = self._calculator.net_pay(salary)
        amount = require_non_negative(amount, "Amount")

        payslip_id = self._payslips.create(
            customer_id=ctx.customer_id,
            employee_id=int(employee_id),
            year=year,
            month=month,
            amount=amount,
            generated_at=now,
        )
        logger.info("Generated payslip %s for employee %s (%04d-%02d)", payslip_id, employee_id, year, month)
        if self._notifier:
            self._notifier.emit("payslips", ChangeType.INSERT, customer_id=ctx.customer_id, record_id=payslip_id)

        return PayslipRecord(
            payslip_id=payslip_id,
            customer_id=ctx.customer_id,
            employee_id=int(employee_id),
            month=month,
            year=year,
            amount=amount,
            generated_at=now,
        )

    def list_payslips(self, ctx: TenantContext, *, employee_id: Optional[int] = None) -> Sequence[PayslipRecord]:
        return self._payslips.list_all(ctx.customer_id, employee_id=employee_id)

    def salary_stats(self, ctx: TenantContext, *, on_date: Optional[date] = None) -> SalaryStats:
        return salary_stats(
            self._salaries.list_active(ctx.customer_id, on_date or now_local().date()),
            self._employees.list_all(ctx.customer_id),
            self._departments.list_all(ctx.customer_id),
        )

    def payslip_summary(self, ctx: TenantContext, *, year: int, month: int) -> PayslipSummary:
        """Totals for ``year``/``month`` compared with the previous calendar month."""
        month = require_month(month)
        prev_year, prev_month = previous_month(int(year), month)
        current = self._payslips.list_for_period(ctx.customer_id, year=int(year), month=month)
        previous = self._payslips.list_for_period(ctx.customer_id, year=prev_year, month=prev_month)
        return summarize_payslips(current, previous)
