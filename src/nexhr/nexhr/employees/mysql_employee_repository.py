from __future__ import annotations

from datetime import date
from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, retry_read
from .model import Department, Employee
from .repository import DepartmentRepository, EmployeeRepository

_EMPLOYEE_COLUMNS = """
    employee_id, customer_id, employee_code, first_name, last_name, email,
    gender, department_id, job_title, joining_date, is_active
"""


def _row_to_employee(r: dict[str, Any]) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        customer_id=int(r["customer_id"]),
        employee_code=r["employee_code"],
        first_name=r["first_name"],
        last_name=r.get("last_name") or "",
        email=r.get("email"),
        gender=r.get("gender"),
        department_id=r.get("department_id"),
        job_title=r.get("job_title"),
        joining_date=r.get("joining_date"),
        is_active=bool(r.get("is_active", True)),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @retry_read
    def get_by_id(self, customer_id: int, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_EMPLOYEE_COLUMNS} FROM employees WHERE customer_id=%s AND employee_id=%s",
                (int(customer_id), int(employee_id)),
            )
            r = fetchone(cur)
            return _row_to_employee(r) if r else None

    @retry_read
    def get_by_code(self, customer_id: int, employee_code: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_EMPLOYEE_COLUMNS} FROM employees WHERE customer_id=%s AND employee_code=%s",
                (int(customer_id), employee_code),
            )
            r = fetchone(cur)
            return _row_to_employee(r) if r else None

    @retry_read
    def list_all(self, customer_id: int, *, department_id: Optional[int] = None) -> Sequence[Employee]:
        clauses = ["customer_id=%s"]
        params: list[object] = [int(customer_id)]
        if department_id is not None:
            clauses.append("department_id=%s")
            params.append(int(department_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_EMPLOYEE_COLUMNS} FROM employees WHERE {where} ORDER BY employee_id",
                tuple(params),
            )
            return [_row_to_employee(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        customer_id: int,
        employee_code: str,
        first_name: str,
        last_name: str,
        email: Optional[str],
        gender: Optional[str],
        department_id: Optional[int],
        job_title: Optional[str],
        joining_date: Optional[date],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees(
                    customer_id, employee_code, first_name, last_name, email,
                    gender, department_id, job_title, joining_date, is_active
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,1)
                """,
                (int(customer_id), employee_code, first_name, last_name, email, gender, department_id, job_title, joining_date),
            )
            return int(cur.lastrowid)

    def update(self, employee: Employee) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET employee_code=%s, first_name=%s, last_name=%s, email=%s, gender=%s,
                    department_id=%s, job_title=%s, joining_date=%s, is_active=%s
                WHERE customer_id=%s AND employee_id=%s
                """,
                (
                    employee.employee_code,
                    employee.first_name,
                    employee.last_name,
                    employee.email,
                    employee.gender,
                    employee.department_id,
                    employee.job_title,
                    employee.joining_date,
                    1 if employee.is_active else 0,
                    int(employee.customer_id),
                    int(employee.employee_id),
                ),
            )
            return cur.rowcount > 0

    def delete(self, customer_id: int, employee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM employees WHERE customer_id=%s AND employee_id=%s",
                (int(customer_id), int(employee_id)),
            )
            return cur.rowcount > 0


class MySQLDepartmentRepository(DepartmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @retry_read
    def list_all(self, customer_id: int) -> Sequence[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT department_id, customer_id, department_name
                FROM departments
                WHERE customer_id=%s
                ORDER BY department_id
                """,
                (int(customer_id),),
            )
            return [
                Department(
                    department_id=int(r["department_id"]),
                    customer_id=int(r["customer_id"]),
                    department_name=r["department_name"],
                )
                for r in fetchall(cur)
            ]

    def create(self, *, customer_id: int, department_name: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO departments(customer_id, department_name) VALUES(%s,%s)",
                (int(customer_id), department_name),
            )
            return int(cur.lastrowid)
