"""In-memory repositories shared by the test modules."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

from src.nexhr.nexhr.assets.model import Asset
from src.nexhr.nexhr.attendance.model import AttendanceRecord, AttendanceReportRow, AttendanceSettings
from src.nexhr.nexhr.container import assemble
from src.nexhr.nexhr.core.enums import RequestStatus
from src.nexhr.nexhr.employees.model import Department, Employee
from src.nexhr.nexhr.expenses.model import Expense
from src.nexhr.nexhr.holidays.model import Holiday
from src.nexhr.nexhr.leave.model import LeaveRequest
from src.nexhr.nexhr.payroll.model import PayslipRecord, SalaryRecord
from src.nexhr.nexhr.tasks.model import Task


class InMemoryEmployees:
    def __init__(self, employees=()):
        self._rows: dict[int, Employee] = {}
        self._id = 0
        for e in employees:
            self._rows[e.employee_id] = e
            self._id = max(self._id, e.employee_id)

    def get_by_id(self, customer_id, employee_id) -> Optional[Employee]:
        e = self._rows.get(int(employee_id))
        return e if e and e.customer_id == customer_id else None

    def get_by_code(self, customer_id, employee_code):
        for e in self._rows.values():
            if e.customer_id == customer_id and e.employee_code == employee_code:
                return e
        return None

    def list_all(self, customer_id, *, department_id=None):
        return [
            e
            for e in self._rows.values()
            if e.customer_id == customer_id and (department_id is None or e.department_id == department_id)
        ]

    def create(self, *, customer_id, employee_code, first_name, last_name, email, gender, department_id, job_title, joining_date):
        self._id += 1
        self._rows[self._id] = Employee(
            employee_id=self._id,
            customer_id=customer_id,
            employee_code=employee_code,
            first_name=first_name,
            last_name=last_name,
            email=email,
            gender=gender,
            department_id=department_id,
            job_title=job_title,
            joining_date=joining_date,
        )
        return self._id

    def update(self, employee):
        if employee.employee_id not in self._rows:
            return False
        self._rows[employee.employee_id] = employee
        return True

    def delete(self, customer_id, employee_id):
        if self.get_by_id(customer_id, employee_id) is None:
            return False
        del self._rows[int(employee_id)]
        return True


class InMemoryDepartments:
    def __init__(self, departments=()):
        self._rows: list[Department] = list(departments)

    def list_all(self, customer_id):
        return [d for d in self._rows if d.customer_id == customer_id]

    def create(self, *, customer_id, department_name):
        department_id = max((d.department_id for d in self._rows), default=0) + 1
        self._rows.append(Department(department_id=department_id, customer_id=customer_id, department_name=department_name))
        return department_id


class InMemoryAttendance:
    def __init__(self, employees: Optional[InMemoryEmployees] = None):
        self._rows: dict[int, AttendanceRecord] = {}
        self._id = 0
        self._employees = employees

    def get_by_id(self, customer_id, attendance_id):
        r = self._rows.get(int(attendance_id))
        return r if r and r.customer_id == customer_id else None

    def get_for_employee_and_date(self, customer_id, employee_id, work_date):
        for r in self._rows.values():
            if r.customer_id == customer_id and r.employee_id == employee_id and r.work_date == work_date:
                return r
        return None

    def list_for_date(self, customer_id, work_date):
        return [r for r in self._rows.values() if r.customer_id == customer_id and r.work_date == work_date]

    def create(self, *, customer_id, employee_id, work_date, check_in_time, check_out_time, status, notes=None, selfie_path=None):
        if self.get_for_employee_and_date(customer_id, employee_id, work_date):
            raise AssertionError("unique key (customer_id, employee_id, work_date) violated")
        self._id += 1
        self._rows[self._id] = AttendanceRecord(
            attendance_id=self._id,
            customer_id=customer_id,
            employee_id=employee_id,
            work_date=work_date,
            check_in_time=check_in_time,
            check_out_time=check_out_time,
            status=status,
            notes=notes,
            selfie_path=selfie_path,
        )
        return self._id

    def update_checkout(self, *, customer_id, attendance_id, check_out_time, status, notes=None):
        r = self.get_by_id(customer_id, attendance_id)
        if not r or r.check_out_time is not None:
            return False
        self._rows[r.attendance_id] = replace(r, check_out_time=check_out_time, status=status, notes=notes)
        return True

    def update_record(self, *, customer_id, attendance_id, check_in_time, check_out_time, status, notes=None, selfie_path=None):
        r = self.get_by_id(customer_id, attendance_id)
        if not r:
            return False
        self._rows[r.attendance_id] = replace(
            r,
            check_in_time=check_in_time,
            check_out_time=check_out_time,
            status=status,
            notes=notes,
            selfie_path=selfie_path,
        )
        return True

    def delete(self, customer_id, attendance_id):
        if self.get_by_id(customer_id, attendance_id) is None:
            return False
        del self._rows[int(attendance_id)]
        return True

    def get_report_rows(self, *, customer_id, start_date, end_date, employee_id=None):
        out = []
        for r in sorted(self._rows.values(), key=lambda x: (x.work_date, x.employee_id), reverse=True):
            if r.customer_id != customer_id or not (start_date <= r.work_date <= end_date):
                continue
            if employee_id is not None and r.employee_id != employee_id:
                continue
            emp = self._employees.get_by_id(customer_id, r.employee_id) if self._employees else None
            out.append(
                AttendanceReportRow(
                    attendance_id=r.attendance_id,
                    employee_id=r.employee_id,
                    employee_code=emp.employee_code if emp else "",
                    employee_name=emp.full_name if emp else "",
                    job_title=emp.job_title if emp else None,
                    work_date=r.work_date,
                    check_in_time=r.check_in_time,
                    check_out_time=r.check_out_time,
                    status=r.status,
                    notes=r.notes,
                    selfie_path=r.selfie_path,
                )
            )
        return out


class InMemorySettings:
    def __init__(self):
        self._rows: dict[int, AttendanceSettings] = {}

    def get(self, customer_id):
        return self._rows.get(customer_id)

    def upsert(self, settings):
        self._rows[settings.customer_id] = settings


class InMemorySalaries:
    def __init__(self):
        self._rows: list[SalaryRecord] = []

    def get_active(self, customer_id, employee_id, on_date):
        candidates = [
            s
            for s in self._rows
            if s.customer_id == customer_id and s.employee_id == employee_id and s.effective_date <= on_date
        ]
        return max(candidates, key=lambda s: s.effective_date) if candidates else None

    def list_active(self, customer_id, on_date):
        ids = []
        for s in self._rows:
            if s.customer_id == customer_id and s.employee_id not in ids:
                ids.append(s.employee_id)
        out = [self.get_active(customer_id, i, on_date) for i in ids]
        return [s for s in out if s is not None]

    def upsert(self, *, customer_id, employee_id, allowances, deductions, effective_date):
        for i, s in enumerate(self._rows):
            if (s.customer_id, s.employee_id, s.effective_date) == (customer_id, employee_id, effective_date):
                self._rows[i] = replace(s, allowances=allowances, deductions=deductions)
                return s.salary_id
        salary_id = len(self._rows) + 1
        self._rows.append(
            SalaryRecord(
                salary_id=salary_id,
                customer_id=customer_id,
                employee_id=employee_id,
                allowances=allowances,
                deductions=deductions,
                effective_date=effective_date,
            )
        )
        return salary_id


class InMemoryPayslips:
    def __init__(self, payslips=()):
        self._rows: list[PayslipRecord] = list(payslips)

    def get_for_period(self, customer_id, employee_id, *, year, month):
        for p in self._rows:
            if (p.customer_id, p.employee_id, p.year, p.month) == (customer_id, employee_id, year, month):
                return p
        return None

    def list_for_period(self, customer_id, *, year, month):
        return [p for p in self._rows if p.customer_id == customer_id and p.year == year and p.month == month]

    def list_all(self, customer_id, *, employee_id=None):
        return [
            p
            for p in self._rows
            if p.customer_id == customer_id and (employee_id is None or p.employee_id == employee_id)
        ]

    def create(self, *, customer_id, employee_id, year, month, amount, generated_at):
        payslip_id = len(self._rows) + 1
        self._rows.append(
            PayslipRecord(
                payslip_id=payslip_id,
                customer_id=customer_id,
                employee_id=employee_id,
                month=month,
                year=year,
                amount=amount,
                generated_at=generated_at,
            )
        )
        return payslip_id


class InMemoryLeaves:
    def __init__(self):
        self._rows: dict[int, LeaveRequest] = {}

    def create(self, *, customer_id, employee_id, leave_type, start_date, end_date, reason, created_at):
        request_id = len(self._rows) + 1
        self._rows[request_id] = LeaveRequest(
            request_id=request_id,
            customer_id=customer_id,
            employee_id=employee_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            status=RequestStatus.PENDING,
            created_at=created_at,
        )
        return request_id

    def get_by_id(self, customer_id, request_id):
        r = self._rows.get(int(request_id))
        return r if r and r.customer_id == customer_id else None

    def list_requests(self, customer_id, *, status=None, employee_id=None, limit=200):
        out = [
            r
            for r in self._rows.values()
            if r.customer_id == customer_id
            and (status is None or r.status == status)
            and (employee_id is None or r.employee_id == employee_id)
        ]
        return out[:limit]

    def decide(self, *, customer_id, request_id, status, decided_by, decided_at, admin_note=None):
        r = self.get_by_id(customer_id, request_id)
        if not r or r.status != RequestStatus.PENDING:
            return False
        self._rows[r.request_id] = replace(
            r, status=status, decided_by=decided_by, decided_at=decided_at, admin_note=admin_note
        )
        return True


class InMemoryHolidays:
    def __init__(self, holidays=()):
        self._rows: dict[int, Holiday] = {h.holiday_id: h for h in holidays}

    def add(self, *, customer_id, holiday_date, name):
        holiday_id = max(self._rows, default=0) + 1
        self._rows[holiday_id] = Holiday(holiday_id=holiday_id, customer_id=customer_id, holiday_date=holiday_date, name=name)
        return holiday_id

    def get_by_date(self, customer_id, holiday_date):
        for h in self._rows.values():
            if h.customer_id == customer_id and h.holiday_date == holiday_date:
                return h
        return None

    def list_between(self, customer_id, start, end):
        rows = [h for h in self._rows.values() if h.customer_id == customer_id and start <= h.holiday_date <= end]
        return sorted(rows, key=lambda h: h.holiday_date)

    def delete(self, customer_id, holiday_id):
        h = self._rows.get(int(holiday_id))
        if not h or h.customer_id != customer_id:
            return False
        del self._rows[h.holiday_id]
        return True


class InMemoryAssets:
    def __init__(self):
        self._rows: dict[int, Asset] = {}

    def create(self, asset):
        asset_id = max(self._rows, default=0) + 1
        self._rows[asset_id] = replace(asset, asset_id=asset_id)
        return asset_id

    def get_by_id(self, customer_id, asset_id):
        a = self._rows.get(int(asset_id))
        return a if a and a.customer_id == customer_id else None

    def get_by_serial(self, customer_id, serial_number):
        for a in self._rows.values():
            if a.customer_id == customer_id and a.serial_number == serial_number:
                return a
        return None

    def list_assets(self, customer_id, *, status=None, employee_id=None):
        rows = [
            a
            for a in self._rows.values()
            if a.customer_id == customer_id
            and (status is None or a.status == status)
            and (employee_id is None or a.employee_id == employee_id)
        ]
        return sorted(rows, key=lambda a: (a.name, a.asset_id))

    def update(self, asset):
        if self.get_by_id(asset.customer_id, asset.asset_id) is None:
            return False
        self._rows[asset.asset_id] = asset
        return True

    def delete(self, customer_id, asset_id):
        if self.get_by_id(customer_id, asset_id) is None:
            return False
        del self._rows[int(asset_id)]
        return True


class InMemoryTasks:
    def __init__(self):
        self._rows: dict[int, Task] = {}

    def create(self, task):
        task_id = max(self._rows, default=0) + 1
        self._rows[task_id] = replace(task, task_id=task_id)
        return task_id

    def get_by_id(self, customer_id, task_id):
        t = self._rows.get(int(task_id))
        return t if t and t.customer_id == customer_id else None

    def list_tasks(self, customer_id, *, status=None, assigned_to=None):
        rows = [
            t
            for t in self._rows.values()
            if t.customer_id == customer_id
            and (status is None or t.status == status)
            and (assigned_to is None or t.assigned_to == assigned_to)
        ]
        return sorted(rows, key=lambda t: (t.deadline is None, t.deadline or date.min, t.task_id))

    def update(self, task):
        if self.get_by_id(task.customer_id, task.task_id) is None:
            return False
        self._rows[task.task_id] = task
        return True

    def delete(self, customer_id, task_id):
        if self.get_by_id(customer_id, task_id) is None:
            return False
        del self._rows[int(task_id)]
        return True


class InMemoryExpenses:
    def __init__(self):
        self._rows: dict[int, Expense] = {}

    def create(self, *, customer_id, employee_id, description, category, amount, submission_date, bill_path=None):
        expense_id = max(self._rows, default=0) + 1
        self._rows[expense_id] = Expense(
            expense_id=expense_id,
            customer_id=customer_id,
            employee_id=employee_id,
            description=description,
            category=category,
            amount=amount,
            submission_date=submission_date,
            bill_path=bill_path,
        )
        return expense_id

    def get_by_id(self, customer_id, expense_id):
        e = self._rows.get(int(expense_id))
        return e if e and e.customer_id == customer_id else None

    def list_expenses(self, customer_id, *, status=None, employee_id=None, start=None, end=None):
        rows = [
            e
            for e in self._rows.values()
            if e.customer_id == customer_id
            and (status is None or e.status == status)
            and (employee_id is None or e.employee_id == employee_id)
            and (start is None or e.submission_date >= start)
            and (end is None or e.submission_date <= end)
        ]
        return sorted(rows, key=lambda e: (e.submission_date, e.expense_id), reverse=True)

    def decide(self, *, customer_id, expense_id, status, decided_by, decided_at):
        e = self.get_by_id(customer_id, expense_id)
        if not e or e.status != RequestStatus.PENDING:
            return False
        self._rows[e.expense_id] = replace(e, status=status, decided_by=decided_by, decided_at=decided_at)
        return True

    def delete(self, customer_id, expense_id):
        if self.get_by_id(customer_id, expense_id) is None:
            return False
        del self._rows[int(expense_id)]
        return True


def make_employee(employee_id, *, customer_id=1, department_id=None, gender=None, joining_date=None, is_active=True, code=None):
    return Employee(
        employee_id=employee_id,
        customer_id=customer_id,
        employee_code=code or f"EMP{employee_id:03d}",
        first_name=f"Emp{employee_id}",
        last_name="Test",
        gender=gender,
        department_id=department_id,
        job_title="Engineer",
        joining_date=joining_date or date(2024, 1, 1),
        is_active=is_active,
    )


def in_memory_container(*, employees=(), departments=(), holidays=(), absent_cutoff_hour=12):
    employees_repo = InMemoryEmployees(employees)
    return assemble(
        employees_repo=employees_repo,
        departments_repo=InMemoryDepartments(departments),
        attendance_repo=InMemoryAttendance(employees_repo),
        attendance_settings_repo=InMemorySettings(),
        salaries_repo=InMemorySalaries(),
        payslips_repo=InMemoryPayslips(),
        leaves_repo=InMemoryLeaves(),
        holidays_repo=InMemoryHolidays(holidays),
        assets_repo=InMemoryAssets(),
        tasks_repo=InMemoryTasks(),
        expenses_repo=InMemoryExpenses(),
        absent_cutoff_hour=absent_cutoff_hour,
    )
