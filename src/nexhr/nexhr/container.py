from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional

from .analytics.live import LiveAnalyticsRegistry
from .analytics.service import AnalyticsService
from .assets.mysql_asset_repository import MySQLAssetRepository
from .assets.repository import AssetRepository
from .assets.service import AssetService
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository, MySQLAttendanceSettingsRepository
from .attendance.policy import DefaultAssignmentPolicy
from .attendance.repository import AttendanceRepository, AttendanceSettingsRepository
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLDepartmentRepository, MySQLEmployeeRepository
from .employees.repository import DepartmentRepository, EmployeeRepository
from .employees.service import EmployeeService
from .expenses.mysql_expense_repository import MySQLExpenseRepository
from .expenses.repository import ExpenseRepository
from .expenses.service import ExpenseService
from .holidays.mysql_holiday_repository import MySQLHolidayRepository
from .holidays.repository import HolidayRepository
from .holidays.service import HolidayService
from .leave.mysql_leave_repository import MySQLLeaveRepository
from .leave.repository import LeaveRepository
from .leave.service import LeaveService
from .payroll.mysql_payroll_repository import MySQLPayslipRepository, MySQLSalaryRepository
from .payroll.repository import PayslipRepository, SalaryRepository
from .payroll.service import PayrollService
from .realtime.notifier import ChangeNotifier
from .tasks.mysql_task_repository import MySQLTaskRepository
from .tasks.repository import TaskRepository
from .tasks.service import TaskService


@dataclass(frozen=True)
class Container:
    notifier: ChangeNotifier

    employees_repo: EmployeeRepository
    departments_repo: DepartmentRepository
    attendance_repo: AttendanceRepository
    attendance_settings_repo: AttendanceSettingsRepository
    salaries_repo: SalaryRepository
    payslips_repo: PayslipRepository
    leaves_repo: LeaveRepository
    holidays_repo: HolidayRepository
    assets_repo: AssetRepository
    tasks_repo: TaskRepository
    expenses_repo: ExpenseRepository

    employee_service: EmployeeService
    attendance_service: AttendanceService
    payroll_service: PayrollService
    leave_service: LeaveService
    holiday_service: HolidayService
    asset_service: AssetService
    task_service: TaskService
    expense_service: ExpenseService
    analytics_service: AnalyticsService
    live_analytics: LiveAnalyticsRegistry

    conn: Optional[DatabaseConnection] = None


def assemble(
    *,
    employees_repo: EmployeeRepository,
    departments_repo: DepartmentRepository,
    attendance_repo: AttendanceRepository,
    attendance_settings_repo: AttendanceSettingsRepository,
    salaries_repo: SalaryRepository,
    payslips_repo: PayslipRepository,
    leaves_repo: LeaveRepository,
    holidays_repo: HolidayRepository,
    assets_repo: AssetRepository,
    tasks_repo: TaskRepository,
    expenses_repo: ExpenseRepository,
    absent_cutoff_hour: int = 12,
    notifier: Optional[ChangeNotifier] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over the given repositories (MySQL or in-memory)."""
    notifier = notifier or ChangeNotifier()
    factory = AttendanceStrategyFactory(absent_cutoff=time(int(absent_cutoff_hour), 0))
    analytics = AnalyticsService(employees_repo, departments_repo, attendance_repo)

    return Container(
        notifier=notifier,
        employees_repo=employees_repo,
        departments_repo=departments_repo,
        attendance_repo=attendance_repo,
        attendance_settings_repo=attendance_settings_repo,
        salaries_repo=salaries_repo,
        payslips_repo=payslips_repo,
        leaves_repo=leaves_repo,
        holidays_repo=holidays_repo,
        assets_repo=assets_repo,
        tasks_repo=tasks_repo,
        expenses_repo=expenses_repo,
        employee_service=EmployeeService(employees_repo, departments_repo, notifier=notifier),
        attendance_service=AttendanceService(
            attendance_repo,
            attendance_settings_repo,
            employees_repo,
            strategy_factory=factory,
            policy=DefaultAssignmentPolicy(factory=factory),
            notifier=notifier,
            holidays=holidays_repo,
        ),
        payroll_service=PayrollService(salaries_repo, payslips_repo, employees_repo, departments_repo, notifier=notifier),
        leave_service=LeaveService(leaves_repo, employees_repo, notifier=notifier),
        holiday_service=HolidayService(holidays_repo, notifier=notifier),
        asset_service=AssetService(assets_repo, employees_repo, notifier=notifier),
        task_service=TaskService(tasks_repo, employees_repo, notifier=notifier),
        expense_service=ExpenseService(expenses_repo, employees_repo, notifier=notifier),
        analytics_service=analytics,
        live_analytics=LiveAnalyticsRegistry(analytics, notifier),
        conn=conn,
    )


def build_container(*, db_config: dict, absent_cutoff_hour: int = 12) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return assemble(
        employees_repo=MySQLEmployeeRepository(conn),
        departments_repo=MySQLDepartmentRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        attendance_settings_repo=MySQLAttendanceSettingsRepository(conn),
        salaries_repo=MySQLSalaryRepository(conn),
        payslips_repo=MySQLPayslipRepository(conn),
        leaves_repo=MySQLLeaveRepository(conn),
        holidays_repo=MySQLHolidayRepository(conn),
        assets_repo=MySQLAssetRepository(conn),
        tasks_repo=MySQLTaskRepository(conn),
        expenses_repo=MySQLExpenseRepository(conn),
        absent_cutoff_hour=absent_cutoff_hour,
        conn=conn,
    )
