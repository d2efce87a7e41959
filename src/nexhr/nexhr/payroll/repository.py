from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import PayslipRecord, SalaryAllowances, SalaryDeductions, SalaryRecord


class SalaryRepository(Protocol):
    def get_active(self, customer_id: int, employee_id: int, on_date: date) -> Optional[SalaryRecord]:
        """Latest record with ``effective_date <= on_date``."""

        raise NotImplementedError

    def list_active(self, customer_id: int, on_date: date) -> Sequence[SalaryRecord]:
        """One active record per employee."""

        raise NotImplementedError

    def upsert(
        self,
        *,
        customer_id: int,
        employee_id: int,
        allowances: SalaryAllowances,
        deductions: SalaryDeductions,
        effective_date: date,
    ) -> int:
        raise NotImplementedError


class PayslipRepository(Protocol):
    def get_for_period(self, customer_id: int, employee_id: int, *, year: int, month: int) -> Optional[PayslipRecord]:
        raise NotImplementedError

    def list_for_period(self, customer_id: int, *, year: int, month: int) -> Sequence[PayslipRecord]:
        raise NotImplementedError

    def list_all(self, customer_id: int, *, employee_id: Optional[int] = None) -> Sequence[PayslipRecord]:
        raise NotImplementedError

    def create(
        self,
        *,
        customer_id: int,
        employee_id: int,
        year: int,
        month: int,
        amount: float,
        generated_at: datetime,
    ) -> int:
        raise NotImplementedError
