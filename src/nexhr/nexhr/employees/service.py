from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

from ..common.validators import optional_int, optional_text, require_bool, require_non_empty
from ..core.context import TenantContext
from ..core.enums import ChangeType, Gender
from ..core.exceptions import NotFoundError, ValidationError
from ..realtime.notifier import ChangeNotifier
from .model import Department, Employee
from .repository import DepartmentRepository, EmployeeRepository

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = {
    "employee_code",
    "first_name",
    "last_name",
    "email",
    "gender",
    "department_id",
    "job_title",
    "joining_date",
    "is_active",
}


def _normalize_gender(value: Optional[str]) -> Optional[str]:
    v = optional_text(value).lower()
    if not v:
        return None
    if v in {g.value for g in Gender}:
        return v
    return Gender.OTHER.value


class EmployeeService:
    """Use case: manage a tenant's employees and departments."""

    def __init__(
        self,
        employees: EmployeeRepository,
        departments: DepartmentRepository,
        *,
        notifier: Optional[ChangeNotifier] = None,
    ):
        self._employees = employees
        self._departments = departments
        self._notifier = notifier

    def _emit(self, table: str, change_type: ChangeType, ctx: TenantContext, record_id: Optional[int]) -> None:
        if self._notifier:
            self._notifier.emit(table, change_type, customer_id=ctx.customer_id, record_id=record_id)

    def employee_code_exists(self, ctx: TenantContext, employee_code: str) -> bool:
        code = (employee_code or "").strip()
        if not code:
            return False
        return self._employees.get_by_code(ctx.customer_id, code) is not None

    def get_employee(self, ctx: TenantContext, employee_id: int) -> Employee:
        emp = self._employees.get_by_id(ctx.customer_id, int(employee_id))
        if not emp:
            raise NotFoundError("Employee not found")
        return emp

    def list_employees(self, ctx: TenantContext, *, department_id: Optional[int] = None) -> Sequence[Employee]:
        return self._employees.list_all(ctx.customer_id, department_id=department_id)

    def create_employee(
        self,
        ctx: TenantContext,
        *,
        employee_code: str,
        first_name: str,
        last_name: str = "",
        email: Optional[str] = None,
        gender: Optional[str] = None,
        department_id: Optional[int] = None,
        job_title: Optional[str] = None,
        joining_date: Optional[date] = None,
    ) -> int:
        employee_code = require_non_empty(employee_code, "Employee ID")
        first_name = require_non_empty(first_name, "First name")

        if self.employee_code_exists(ctx, employee_code):
            raise ValidationError(f"Employee ID {employee_code} already exists")

        employee_id = self._employees.create(
            customer_id=ctx.customer_id,
            employee_code=employee_code,
            first_name=first_name,
            last_name=optional_text(last_name),
            email=optional_text(email) or None,
            gender=_normalize_gender(gender),
            department_id=optional_int(department_id, "Department"),
            job_title=optional_text(job_title) or None,
            joining_date=joining_date,
        )
        logger.info("Created employee %s (%s) for customer %s", employee_id, employee_code, ctx.customer_id)
        self._emit("employees", ChangeType.INSERT, ctx, employee_id)
        return employee_id

    def update_employee(self, ctx: TenantContext, employee_id: int, **changes) -> Employee:
        current = self.get_employee(ctx, employee_id)

        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown employee fields: {', '.join(sorted(unknown))}")

        if "employee_code" in changes:
            code = require_non_empty(changes["employee_code"], "Employee ID")
            other = self._employees.get_by_code(ctx.customer_id, code)
            if other and other.employee_id != current.employee_id:
                raise ValidationError(f"Employee ID {code} already exists")
            changes["employee_code"] = code
        if "first_name" in changes:
            changes["first_name"] = require_non_empty(changes["first_name"], "First name")
        if "gender" in changes:
            changes["gender"] = _normalize_gender(changes["gender"])
        if "last_name" in changes:
            changes["last_name"] = optional_text(changes["last_name"])
        for name in ("email", "job_title"):
            if name in changes:
                changes[name] = optional_text(changes[name]) or None
        if "department_id" in changes:
            changes["department_id"] = optional_int(changes["department_id"], "Department")
        if "is_active" in changes:
            changes["is_active"] = require_bool(changes["is_active"], "Active")

        updated = replace(current, **changes)
        if not self._employees.update(updated):
            raise ValidationError("Updating the employee failed")
        self._emit("employees", ChangeType.UPDATE, ctx, current.employee_id)
        return updated

    def delete_employee(self, ctx: TenantContext, employee_id: int) -> None:
        self.get_employee(ctx, employee_id)
        if not self._employees.delete(ctx.customer_id, int(employee_id)):
            raise ValidationError("Deleting the employee failed")
        logger.info("Deleted employee %s for customer %s", employee_id, ctx.customer_id)
        self._emit("employees", ChangeType.DELETE, ctx, int(employee_id))

    def list_departments(self, ctx: TenantContext) -> Sequence[Department]:
        return self._departments.list_all(ctx.customer_id)

    def create_department(self, ctx: TenantContext, department_name: str) -> int:
        name = require_non_empty(department_name, "Department name")
        if any(d.department_name.lower() == name.lower() for d in self._departments.list_all(ctx.customer_id)):
            raise ValidationError(f"Department {name} already exists")
        department_id = self._departments.create(customer_id=ctx.customer_id, department_name=name)
        self._emit("departments", ChangeType.INSERT, ctx, department_id)
        return department_id
