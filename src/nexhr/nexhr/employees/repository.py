from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Department, Employee


class EmployeeRepository(Protocol):
    """Repository interface for employees.

    Every method is scoped to ``customer_id``; services depend on this
    interface, never on a concrete database.
    """

    def get_by_id(self, customer_id: int, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_code(self, customer_id: int, employee_code: str) -> Optional[Employee]:
        raise NotImplementedError

    def list_all(self, customer_id: int, *, department_id: Optional[int] = None) -> Sequence[Employee]:
        raise NotImplementedError

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
        raise NotImplementedError

    def update(self, employee: Employee) -> bool:
        raise NotImplementedError

    def delete(self, customer_id: int, employee_id: int) -> bool:
        raise NotImplementedError


class DepartmentRepository(Protocol):
    def list_all(self, customer_id: int) -> Sequence[Department]:
        raise NotImplementedError

    def create(self, *, customer_id: int, department_name: str) -> int:
        raise NotImplementedError
