from datetime import date, datetime

from src.nexhr.nexhr.attendance.model import AttendanceRecord, AttendanceSettings
from src.nexhr.nexhr.attendance.policy import DefaultAssignmentPolicy
from src.nexhr.nexhr.core.enums import AttendanceStatus
from tests.fakes import make_employee

SETTINGS = AttendanceSettings(customer_id=1)
DAY = date(2025, 3, 10)


def _record(employee_id, status=AttendanceStatus.PRESENT):
    return AttendanceRecord(
        attendance_id=employee_id,
        customer_id=1,
        employee_id=employee_id,
        work_date=DAY,
        check_in_time=datetime(2025, 3, 10, 9, 0),
        check_out_time=None,
        status=status,
    )


def test_status_for_missing_follows_the_noon_cutoff():
    policy = DefaultAssignmentPolicy()

    assert policy.status_for_missing(work_date=DAY, now=datetime(2025, 3, 10, 11, 0), settings=SETTINGS) == AttendanceStatus.NOT_MARKED
    assert policy.status_for_missing(work_date=DAY, now=datetime(2025, 3, 10, 12, 0), settings=SETTINGS) == AttendanceStatus.ABSENT
    assert policy.status_for_missing(work_date=DAY, now=datetime(2025, 3, 11, 8, 0), settings=SETTINGS) == AttendanceStatus.ABSENT


def test_backfill_only_covers_active_employees_without_a_record():
    employees = [make_employee(1), make_employee(2), make_employee(3), make_employee(4, is_active=False)]
    records = [_record(1)]

    out = DefaultAssignmentPolicy().backfill(
        employees=employees,
        records=records,
        work_date=DAY,
        now=datetime(2025, 3, 10, 14, 0),
        settings=SETTINGS,
    )

    assert [r.employee_id for r in out] == [2, 3]
    assert all(r.status == AttendanceStatus.ABSENT for r in out)
    assert all(r.attendance_id is None and r.check_in_time is None for r in out)


def test_backfill_leaves_existing_records_untouched():
    existing = _record(1, status=AttendanceStatus.LATE)
    out = DefaultAssignmentPolicy().backfill(
        employees=[make_employee(1)],
        records=[existing],
        work_date=DAY,
        now=datetime(2025, 3, 12, 9, 0),
        settings=SETTINGS,
    )

    assert out == []
    assert existing.status == AttendanceStatus.LATE


def test_backfill_skips_holidays():
    out = DefaultAssignmentPolicy().backfill(
        employees=[make_employee(1), make_employee(2)],
        records=[],
        work_date=DAY,
        now=datetime(2025, 3, 12, 9, 0),
        settings=SETTINGS,
        holidays={DAY},
    )

    assert out == []
