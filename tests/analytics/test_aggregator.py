from datetime import date, datetime

from src.nexhr.nexhr.analytics.aggregator import (
    build_summary,
    count_attendance,
    department_counts,
    gender_distribution,
    percentage_change,
    recent_hires,
    salary_stats,
    summarize_payslips,
)
from src.nexhr.nexhr.analytics.model import AttendanceCounts, GenderDistribution, NamedCount
from src.nexhr.nexhr.core.enums import AttendanceStatus
from src.nexhr.nexhr.employees.model import Department
from src.nexhr.nexhr.payroll.model import PayslipRecord, SalaryAllowances, SalaryDeductions, SalaryRecord
from tests.fakes import make_employee

NOW = datetime(2025, 3, 31, 10, 0)


class Row:
    def __init__(self, status):
        self.status = status


def _payslip(payslip_id, amount, month=3):
    return PayslipRecord(
        payslip_id=payslip_id,
        customer_id=1,
        employee_id=payslip_id,
        month=month,
        year=2025,
        amount=amount,
        generated_at=datetime(2025, month, 28),
    )


def test_count_attendance_buckets_by_status():
    rows = [Row(AttendanceStatus.PRESENT)] * 3 + [Row(AttendanceStatus.LATE), Row(AttendanceStatus.ABSENT)]

    assert count_attendance(rows) == AttendanceCounts(present=3, absent=1, late=1)


def test_count_attendance_accepts_stored_labels_and_ignores_others():
    rows = [Row("present"), Row("LATE"), Row("Half Day"), Row("Not Marked"), Row("bogus")]

    assert count_attendance(rows) == AttendanceCounts(present=1, absent=0, late=1)


def test_count_attendance_empty():
    assert count_attendance([]) == AttendanceCounts(0, 0, 0)


def test_percentage_change_edges():
    assert percentage_change(0, 0) == 0
    assert percentage_change(10, 0) == 100
    assert percentage_change(150, 100) == 50
    assert percentage_change(50, 100) == -50
    assert percentage_change(112.5, 100) == 13


def test_summarize_payslips_against_previous_month():
    current = [_payslip(1, 30000), _payslip(2, 25000)]
    previous = [_payslip(3, 50000, month=2)]

    s = summarize_payslips(current, previous)

    assert s.total == 55000
    assert s.average == 27500
    assert s.percentage_change == 10


def test_summarize_payslips_with_no_rows():
    s = summarize_payslips([], [])
    assert (s.total, s.average, s.percentage_change) == (0, 0, 0)


def test_department_counts_keep_first_seen_order():
    departments = [Department(1, 1, "Engineering"), Department(2, 1, "Sales")]
    employees = [
        make_employee(1, department_id=2),
        make_employee(2, department_id=1),
        make_employee(3, department_id=2),
        make_employee(4),
    ]

    assert department_counts(employees, departments) == (
        NamedCount("Sales", 2),
        NamedCount("Engineering", 1),
        NamedCount("Unassigned", 1),
    )


def test_department_counts_are_stable_across_runs():
    departments = [Department(1, 1, "Engineering"), Department(2, 1, "Sales"), Department(3, 1, "Support")]
    employees = [make_employee(i, department_id=(i % 3) + 1) for i in range(1, 10)] + [make_employee(10)]

    first = department_counts(employees, departments)

    assert department_counts(employees, departments) == first
    assert department_counts(list(employees), list(departments)) == first


def test_gender_distribution():
    employees = [make_employee(1, gender="male"), make_employee(2, gender="Female"), make_employee(3)]

    assert gender_distribution(employees) == GenderDistribution(male=1, female=1, other=1)


def test_recent_hires_window_and_limit():
    employees = [
        make_employee(1, joining_date=date(2025, 3, 21)),
        make_employee(2, joining_date=date(2025, 2, 19)),
        make_employee(3, joining_date=date(2025, 3, 1)),
    ]

    hires = recent_hires(employees, now=NOW)

    assert [h.employee_id for h in hires] == [1, 3]
    assert hires[0].joining_date == "2025-03-21"


def test_recent_hires_capped_in_source_order():
    employees = [make_employee(i, joining_date=date(2025, 3, 20 + i % 5)) for i in range(1, 9)]

    assert [h.employee_id for h in recent_hires(employees, now=NOW)] == [1, 2, 3, 4, 5]


def test_salary_stats_groups_gross_by_department():
    departments = [Department(1, 1, "Engineering"), Department(2, 1, "Sales")]
    employees = [make_employee(1, department_id=1), make_employee(2, department_id=1), make_employee(3)]
    salaries = [
        SalaryRecord(1, 1, 1, SalaryAllowances(basic_salary=40000, hra=10000), SalaryDeductions(income_tax=5000), date(2025, 1, 1)),
        SalaryRecord(2, 1, 2, SalaryAllowances(basic_salary=30000), SalaryDeductions(), date(2025, 1, 1)),
        SalaryRecord(3, 1, 3, SalaryAllowances(basic_salary=20000), SalaryDeductions(), date(2025, 1, 1)),
    ]

    stats = salary_stats(salaries, employees, departments)

    assert stats.total_employees == 3
    assert stats.total_salary == 100000
    assert round(stats.average_salary, 2) == 33333.33
    assert [(d.name, d.value) for d in stats.department_salaries] == [("Engineering", 80000), ("Sales", 0)]


def test_build_summary_from_empty_inputs_is_zeroed():
    s = build_summary(employees=[], departments=[], attendance=[], now=NOW)

    assert s.total_employees == 0
    assert s.department_counts == ()
    assert s.attendance_summary == AttendanceCounts()
    assert s.to_dict()["gender_distribution"] == {"male": 0, "female": 0, "other": 0}
