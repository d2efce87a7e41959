from __future__ import annotations

from dataclasses import fields
from datetime import date, datetime
from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, retry_read, to_float
from .model import PayslipRecord, SalaryAllowances, SalaryDeductions, SalaryRecord
from .repository import PayslipRepository, SalaryRepository

_ALLOWANCE_COLUMNS = [f.name for f in fields(SalaryAllowances)]
_DEDUCTION_COLUMNS = [f.name for f in fields(SalaryDeductions)]
_SALARY_COLUMNS = ", ".join(
    ["s.salary_id", "s.customer_id", "s.employee_id", "s.effective_date"]
    + [f"s.{c}" for c in _ALLOWANCE_COLUMNS + _DEDUCTION_COLUMNS]
)


def _row_to_salary(r: dict[str, Any]) -> SalaryRecord:
    return SalaryRecord(
        salary_id=int(r["salary_id"]),
        customer_id=int(r["customer_id"]),
        employee_id=int(r["employee_id"]),
        allowances=SalaryAllowances(**{c: to_float(r.get(c)) for c in _ALLOWANCE_COLUMNS}),
        deductions=SalaryDeductions(**{c: to_float(r.get(c)) for c in _DEDUCTION_COLUMNS}),
        effective_date=r["effective_date"],
    )


def _row_to_payslip(r: dict[str, Any]) -> PayslipRecord:
    return PayslipRecord(
        payslip_id=int(r["payslip_id"]),
        customer_id=int(r["customer_id"]),
        employee_id=int(r["employee_id"]),
        month=int(r["month"]),
        year=int(r["year"]),
        amount=to_float(r["amount"]),
        generated_at=r["generated_at"],
    )


class MySQLSalaryRepository(SalaryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @retry_read
    def get_active(self, customer_id: int, employee_id: int, on_date: date) -> Optional[SalaryRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SALARY_COLUMNS}
                FROM salaries s
                WHERE s.customer_id=%s AND s.employee_id=%s AND s.effective_date <= %s
                ORDER BY s.effective_date DESC
                LIMIT 1
                """,
                (int(customer_id), int(employee_id), on_date),
            )
            r = fetchone(cur)
            return _row_to_salary(r) if r else None

    @retry_read
    def list_active(self, customer_id: int, on_date: date) -> Sequence[SalaryRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SALARY_COLUMNS}
                FROM salaries s
                JOIN (
                    SELECT employee_id, MAX(effective_date) AS effective_date
                    FROM salaries
                    WHERE customer_id=%s AND effective_date <= %s
                    GROUP BY employee_id
                ) latest ON latest.employee_id = s.employee_id AND latest.effective_date = s.effective_date
                WHERE s.customer_id=%s
                ORDER BY s.employee_id
                """,
                (int(customer_id), on_date, int(customer_id)),
            )
            return [_row_to_salary(r) for r in fetchall(cur)]

    def upsert(
        self,
        *,
        customer_id: int,
        employee_id: int,
        allowances: SalaryAllowances,
        deductions: SalaryDeductions,
        effective_date: date,
    ) -> int:
        columns = _ALLOWANCE_COLUMNS + _DEDUCTION_COLUMNS
        values = [getattr(allowances, c) for c in _ALLOWANCE_COLUMNS] + [getattr(deductions, c) for c in _DEDUCTION_COLUMNS]
        placeholders = ",".join(["%s"] * (len(columns) + 3))
        updates = ", ".join(f"{c}=VALUES({c})" for c in columns)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO salaries(customer_id, employee_id, effective_date, {", ".join(columns)})
                VALUES({placeholders})
                ON DUPLICATE KEY UPDATE salary_id=LAST_INSERT_ID(salary_id), {updates}
                """,
                tuple([int(customer_id), int(employee_id), effective_date] + values),
            )
            return int(cur.lastrowid)


class MySQLPayslipRepository(PayslipRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @retry_read
    def get_for_period(self, customer_id: int, employee_id: int, *, year: int, month: int) -> Optional[PayslipRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT payslip_id, customer_id, employee_id, month, year, amount, generated_at
                FROM payslips
                WHERE customer_id=%s AND employee_id=%s AND year=%s AND month=%s
                """,
                (int(customer_id), int(employee_id), int(year), int(month)),
            )
            r = fetchone(cur)
            return _row_to_payslip(r) if r else None

    @retry_read
    def list_for_period(self, customer_id: int, *, year: int, month: int) -> Sequence[PayslipRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT payslip_id, customer_id, employee_id, month, year, amount, generated_at
                FROM payslips
                WHERE customer_id=%s AND year=%s AND month=%s
                ORDER BY employee_id
                """,
                (int(customer_id), int(year), int(month)),
            )
            return [_row_to_payslip(r) for r in fetchall(cur)]

    @retry_read
    def list_all(self, customer_id: int, *, employee_id: Optional[int] = None) -> Sequence[PayslipRecord]:
        clauses = ["customer_id=%s"]
        params: list[object] = [int(customer_id)]
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT payslip_id, customer_id, employee_id, month, year, amount, generated_at
                FROM payslips
                WHERE {where}
                ORDER BY year DESC, month DESC, employee_id
                """,
                tuple(params),
            )
            return [_row_to_payslip(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payslips(customer_id, employee_id, month, year, amount, generated_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(customer_id), int(employee_id), int(month), int(year), float(amount), generated_at),
            )
            return int(cur.lastrowid)
