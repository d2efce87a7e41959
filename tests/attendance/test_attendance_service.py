from __future__ import annotations

from datetime import date, datetime, time

import pytest

from src.nexhr.nexhr.core.context import TenantContext
from src.nexhr.nexhr.core.enums import AttendanceStatus, ChangeType
from src.nexhr.nexhr.core.exceptions import NotFoundError, ValidationError
from tests.fakes import in_memory_container, make_employee

DAY = date(2025, 3, 10)


@pytest.fixture
def container():
    return in_memory_container(employees=[make_employee(1), make_employee(2), make_employee(3)])


@pytest.fixture
def service(container):
    return container.attendance_service


def _ctx(employee_id=1):
    return TenantContext(customer_id=1, employee_id=employee_id)


def test_checkin_on_time_is_present(service):
    rec = service.check_in(_ctx(), now=datetime(2025, 3, 10, 9, 10))

    assert rec.status == AttendanceStatus.PRESENT
    assert rec.attendance_id is not None


def test_checkin_after_threshold_is_late(service):
    rec = service.check_in(_ctx(), now=datetime(2025, 3, 10, 9, 45))

    assert rec.status == AttendanceStatus.LATE


def test_checkin_uses_tenant_settings(service):
    service.update_settings(_ctx(), work_start_time=time(10, 0), late_threshold_minutes=0)

    rec = service.check_in(_ctx(), now=datetime(2025, 3, 10, 10, 1))

    assert rec.status == AttendanceStatus.LATE


def test_duplicate_checkin_rejected(service):
    service.check_in(_ctx(), now=datetime(2025, 3, 10, 9, 0))

    with pytest.raises(ValidationError):
        service.check_in(_ctx(), now=datetime(2025, 3, 10, 9, 5))


def test_checkout_without_checkin_rejected(service):
    with pytest.raises(ValidationError):
        service.check_out(_ctx(), now=datetime(2025, 3, 10, 17, 0))


def test_checkout_keeps_status_and_rejects_second_checkout(service):
    service.check_in(_ctx(), now=datetime(2025, 3, 10, 9, 50))
    rec = service.check_out(_ctx(), now=datetime(2025, 3, 10, 18, 0))

    assert rec.status == AttendanceStatus.LATE
    assert rec.work_hours == "08:10"
    with pytest.raises(ValidationError):
        service.check_out(_ctx(), now=datetime(2025, 3, 10, 18, 5))


def test_checkin_requires_employee_login(service):
    with pytest.raises(ValidationError):
        service.check_in(TenantContext(customer_id=1), now=datetime(2025, 3, 10, 9, 0))


def test_checkin_replaces_backfilled_placeholder(container, service):
    service.backfill_day(_ctx(), DAY, now=datetime(2025, 3, 10, 12, 30))

    rec = service.check_in(_ctx(), now=datetime(2025, 3, 10, 12, 45))

    stored = container.attendance_repo.get_for_employee_and_date(1, 1, DAY)
    assert rec.status == AttendanceStatus.LATE
    assert stored.check_in_time == datetime(2025, 3, 10, 12, 45)


def test_checkin_over_placeholder_keeps_selfie(container, service):
    service.backfill_day(_ctx(), DAY, now=datetime(2025, 3, 10, 8, 0))

    rec = service.check_in(_ctx(), now=datetime(2025, 3, 10, 9, 0), selfie_path="selfies/1.jpg")

    stored = container.attendance_repo.get_for_employee_and_date(1, 1, DAY)
    assert rec.selfie_path == "selfies/1.jpg"
    assert stored.selfie_path == "selfies/1.jpg"
    assert stored.status == AttendanceStatus.PRESENT


def test_checkin_does_not_overwrite_manual_entry(container, service):
    service.add_record(_ctx(), employee_id=1, work_date=DAY, status=AttendanceStatus.HALF_DAY)

    with pytest.raises(ValidationError):
        service.check_in(_ctx(), now=datetime(2025, 3, 10, 9, 0))
    assert container.attendance_repo.get_for_employee_and_date(1, 1, DAY).status == AttendanceStatus.HALF_DAY


def test_checkin_does_not_overwrite_absent_entry_with_notes(service):
    service.add_record(_ctx(), employee_id=1, work_date=DAY, status=AttendanceStatus.ABSENT, notes="Sick, called in")

    with pytest.raises(ValidationError):
        service.check_in(_ctx(), now=datetime(2025, 3, 10, 9, 0))


def test_admin_edit_keeps_selfie(container, service):
    rec = service.check_in(_ctx(), now=datetime(2025, 3, 10, 9, 0), selfie_path="selfies/1.jpg")

    service.update_record(_ctx(), rec.attendance_id, notes="Badge reader down")

    assert container.attendance_repo.get_by_id(1, rec.attendance_id).selfie_path == "selfies/1.jpg"


def test_add_record_derives_status_and_rejects_duplicates(service):
    service.add_record(_ctx(), employee_id=2, work_date=DAY, check_in=time(9, 0), check_out=time(17, 0))

    rows = service.list_records(_ctx(), start=DAY, end=DAY)
    assert [(r.employee_id, r.status) for r in rows] == [(2, AttendanceStatus.PRESENT)]
    with pytest.raises(ValidationError):
        service.add_record(_ctx(), employee_id=2, work_date=DAY, status=AttendanceStatus.ABSENT)


def test_add_record_for_past_day_without_checkin_is_absent(service):
    service.add_record(_ctx(), employee_id=2, work_date=DAY, now=datetime(2025, 3, 12, 9, 0))

    assert service.daily_summary(_ctx(), DAY, include_missing=False).absent == 1


def test_add_record_rejects_checkout_before_checkin(service):
    with pytest.raises(ValidationError):
        service.add_record(_ctx(), employee_id=2, work_date=DAY, check_in=time(17, 0), check_out=time(9, 0))


def test_add_record_for_unknown_employee(service):
    with pytest.raises(NotFoundError):
        service.add_record(_ctx(), employee_id=99, work_date=DAY)


def test_update_status_and_delete(service):
    attendance_id = service.add_record(_ctx(), employee_id=3, work_date=DAY, check_in=time(9, 0))

    rec = service.update_status(_ctx(), employee_id=3, work_date=DAY, status=AttendanceStatus.HALF_DAY)
    assert rec.status == AttendanceStatus.HALF_DAY
    assert rec.check_in_time == datetime(2025, 3, 10, 9, 0)

    service.delete_record(_ctx(), attendance_id)
    with pytest.raises(NotFoundError):
        service.delete_record(_ctx(), attendance_id)


def test_update_record_keeps_unset_fields(service):
    attendance_id = service.add_record(_ctx(), employee_id=3, work_date=DAY, check_in=time(9, 0), notes="wfh")

    rec = service.update_record(_ctx(), attendance_id, check_out=time(13, 0))

    assert rec.notes == "wfh"
    assert rec.check_out_time == datetime(2025, 3, 10, 13, 0)
    assert rec.status == AttendanceStatus.PRESENT


def test_records_are_scoped_to_tenant(service):
    service.add_record(_ctx(), employee_id=1, work_date=DAY, check_in=time(9, 0))

    other = TenantContext(customer_id=2, employee_id=1)
    assert service.list_records(other, start=DAY, end=DAY) == []


def test_daily_summary_counts_placeholders_for_missing_employees(service):
    service.add_record(_ctx(), employee_id=1, work_date=DAY, check_in=time(9, 0))
    service.add_record(_ctx(), employee_id=2, work_date=DAY, check_in=time(10, 0))

    before_noon = service.daily_summary(_ctx(), DAY, now=datetime(2025, 3, 10, 11, 0))
    after_noon = service.daily_summary(_ctx(), DAY, now=datetime(2025, 3, 10, 13, 0))

    assert (before_noon.present, before_noon.late, before_noon.absent) == (1, 1, 0)
    assert (after_noon.present, after_noon.late, after_noon.absent) == (1, 1, 1)


def test_backfill_day_persists_once(container, service):
    service.add_record(_ctx(), employee_id=1, work_date=DAY, check_in=time(9, 0))

    assert service.backfill_day(_ctx(), DAY, now=datetime(2025, 3, 11, 8, 0)) == 2
    assert service.backfill_day(_ctx(), DAY, now=datetime(2025, 3, 11, 8, 0)) == 0
    assert container.attendance_repo.get_for_employee_and_date(1, 1, DAY).status == AttendanceStatus.PRESENT
    assert container.attendance_repo.get_for_employee_and_date(1, 2, DAY).status == AttendanceStatus.ABSENT


def test_holidays_are_not_backfilled_or_counted_absent():
    container = in_memory_container(employees=[make_employee(1), make_employee(2)])
    service = container.attendance_service
    container.holiday_service.add_holiday(_ctx(), holiday_date=DAY, name="Holi")

    assert service.backfill_day(_ctx(), DAY, now=datetime(2025, 3, 11, 8, 0)) == 0
    assert service.daily_summary(_ctx(), DAY, now=datetime(2025, 3, 11, 8, 0)).absent == 0
    assert service.backfill_day(_ctx(), date(2025, 3, 11), now=datetime(2025, 3, 12, 8, 0)) == 2


def test_writes_publish_change_events(container, service):
    seen = []
    container.notifier.subscribe("attendance_records", [], seen.append)

    service.check_in(_ctx(), now=datetime(2025, 3, 10, 9, 0))
    service.check_out(_ctx(), now=datetime(2025, 3, 10, 17, 0))

    assert [e.change_type for e in seen] == [ChangeType.INSERT, ChangeType.UPDATE]
    assert all(e.customer_id == 1 for e in seen)


def test_settings_default_and_validation(service):
    s = service.get_settings(_ctx())
    assert (s.work_start_time, s.late_threshold_minutes) == (time(9, 0), 30)

    with pytest.raises(ValidationError):
        service.update_settings(_ctx(), late_threshold_minutes=-5)
    with pytest.raises(ValidationError):
        service.update_settings(_ctx(), late_threshold_minutes=24 * 60)
    with pytest.raises(ValidationError):
        service.update_settings(_ctx(), late_threshold_minutes="soon")

    assert service.update_settings(_ctx(), late_threshold_minutes="720").late_threshold_minutes == 720


def test_report_and_csv_export(service):
    service.add_record(_ctx(), employee_id=1, work_date=DAY, check_in=time(9, 0), check_out=time(17, 30))
    service.add_record(_ctx(), employee_id=1, work_date=date(2025, 3, 11), check_in=time(9, 0), check_out=time(17, 0))

    report = service.build_report(_ctx(), start=DAY, end=date(2025, 3, 11))
    assert report.summary == [
        {"employee_id": 1, "employee_code": "EMP001", "employee_name": "Emp1 Test", "days": 2, "total_hours": "16:30"}
    ]

    csv_text = service.export_csv(_ctx(), start=DAY, end=date(2025, 3, 11))
    lines = csv_text.strip().splitlines()
    assert lines[0].startswith("Employee ID,Name,Date")
    assert len(lines) == 3
    assert "08:30" in csv_text


def test_list_records_rejects_inverted_range(service):
    with pytest.raises(ValidationError):
        service.list_records(_ctx(), start=date(2025, 3, 11), end=DAY)
