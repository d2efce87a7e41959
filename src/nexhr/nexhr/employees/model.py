from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee of one customer (tenant).

    Note: plain data object, no DB access here.
    """

    employee_id: int
    customer_id: int
    employee_code: str
    first_name: str
    last_name: str = ""
    email: Optional[str] = None
    gender: Optional[str] = None
    department_id: Optional[int] = None
    job_title: Optional[str] = None
    joining_date: Optional[date] = None
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class Department:
    department_id: int
    customer_id: int
    department_name: str
