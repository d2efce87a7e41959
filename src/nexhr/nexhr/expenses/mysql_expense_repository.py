from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, Sequence

from ..core.enums import RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, retry_read, to_float
from .model import Expense
from .repository import ExpenseRepository

_COLUMNS = """
    expense_id, customer_id, employee_id, description, category, amount,
    submission_date, status, bill_path, decided_by, decided_at
"""


def _row_to_expense(r: dict[str, Any]) -> Expense:
    return Expense(
        expense_id=int(r["expense_id"]),
        customer_id=int(r["customer_id"]),
        employee_id=int(r["employee_id"]),
        description=r.get("description") or "",
        category=r["category"],
        amount=to_float(r.get("amount")),
        submission_date=r["submission_date"],
        status=RequestStatus(r["status"]),
        bill_path=r.get("bill_path"),
        decided_by=int(r["decided_by"]) if r.get("decided_by") is not None else None,
        decided_at=r.get("decided_at"),
    )


class MySQLExpenseRepository(ExpenseRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        customer_id: int,
        employee_id: int,
        description: str,
        category: str,
        amount: float,
        submission_date: date,
        bill_path: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO expenses(
                    customer_id, employee_id, description, category, amount, submission_date, status, bill_path
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(customer_id),
                    int(employee_id),
                    description,
                    category,
                    amount,
                    submission_date,
                    RequestStatus.PENDING.value,
                    bill_path,
                ),
            )
            return int(cur.lastrowid)

    @retry_read
    def get_by_id(self, customer_id: int, expense_id: int) -> Optional[Expense]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM expenses WHERE customer_id=%s AND expense_id=%s",
                (int(customer_id), int(expense_id)),
            )
            r = fetchone(cur)
            return _row_to_expense(r) if r else None

    @retry_read
    def list_expenses(
        self,
        customer_id: int,
        *,
        status: Optional[RequestStatus] = None,
        employee_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[Expense]:
        clauses = ["customer_id=%s"]
        params: list[object] = [int(customer_id)]

        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))
        if start is not None:
            clauses.append("submission_date >= %s")
            params.append(start)
        if end is not None:
            clauses.append("submission_date <= %s")
            params.append(end)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM expenses
                WHERE {where}
                ORDER BY submission_date DESC, expense_id DESC
                """,
                tuple(params),
            )
            return [_row_to_expense(r) for r in fetchall(cur)]

    def decide(
        self,
        *,
        customer_id: int,
        expense_id: int,
        status: RequestStatus,
        decided_by: int,
        decided_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE expenses
                SET status=%s, decided_by=%s, decided_at=%s
                WHERE customer_id=%s AND expense_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(decided_by),
                    decided_at,
                    int(customer_id),
                    int(expense_id),
                    RequestStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def delete(self, customer_id: int, expense_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM expenses WHERE customer_id=%s AND expense_id=%s",
                (int(customer_id), int(expense_id)),
            )
            return cur.rowcount > 0
