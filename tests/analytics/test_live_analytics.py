from datetime import date, datetime, time

from src.nexhr.nexhr.analytics.live import LiveAnalytics, LiveAnalyticsRegistry
from src.nexhr.nexhr.core.context import TenantContext
from tests.fakes import in_memory_container, make_employee

NOW = datetime(2025, 3, 10, 10, 0)
ADMIN = TenantContext(customer_id=1, employee_id=1)


def _live(container, **kwargs):
    return LiveAnalytics(container.analytics_service, container.notifier, ADMIN, clock=lambda: NOW, **kwargs)


def test_start_computes_initial_summary():
    container = in_memory_container(employees=[make_employee(1), make_employee(2)])
    live = _live(container)

    summary = live.start()

    assert summary.total_employees == 2
    assert live.latest is summary


def test_recomputes_on_employee_and_attendance_changes():
    container = in_memory_container(employees=[make_employee(1)])
    updates = []
    live = _live(container, on_update=updates.append)
    live.start()

    container.employee_service.create_employee(
        ADMIN, employee_code="EMP002", first_name="Ravi", joining_date=date(2025, 3, 5)
    )
    container.attendance_service.add_record(ADMIN, employee_id=1, work_date=NOW.date(), check_in=time(9, 0))

    assert live.recomputes == 3
    assert live.latest.total_employees == 2
    assert live.latest.attendance_summary.present == 1
    assert [h.employee_code for h in live.latest.recent_hires] == ["EMP002"]
    assert len(updates) == 3


def test_attendance_delete_triggers_recompute():
    container = in_memory_container(employees=[make_employee(1)])
    attendance_id = container.attendance_service.add_record(ADMIN, employee_id=1, work_date=NOW.date(), check_in=time(9, 0))
    live = _live(container)
    live.start()

    container.attendance_service.delete_record(ADMIN, attendance_id)

    assert live.recomputes == 2
    assert live.latest.attendance_summary.present == 0


def test_ignores_other_tenants_and_stops_after_close():
    container = in_memory_container(employees=[make_employee(1)])
    live = _live(container)
    live.start()

    container.employee_service.create_department(TenantContext(customer_id=2), "Elsewhere")
    assert live.recomputes == 1

    live.close()
    container.employee_service.create_department(ADMIN, "Engineering")
    assert live.recomputes == 1
    assert container.notifier.subscriber_count() == 0


def test_current_recomputes_after_day_rollover():
    container = in_memory_container(employees=[make_employee(1)])
    clock = [NOW]
    live = LiveAnalytics(container.analytics_service, container.notifier, ADMIN, clock=lambda: clock[0])
    live.start()

    assert live.current() is live.latest
    assert live.recomputes == 1

    clock[0] = datetime(2025, 3, 11, 8, 0)
    live.current()
    assert live.recomputes == 2


def test_registry_keeps_one_live_view_per_tenant():
    container = in_memory_container(employees=[make_employee(1), make_employee(2, customer_id=2)])
    registry = LiveAnalyticsRegistry(container.analytics_service, container.notifier, clock=lambda: NOW)

    first = registry.for_tenant(1)
    assert registry.for_tenant(1) is first
    assert registry.for_tenant(2) is not first

    container.employee_service.create_employee(ADMIN, employee_code="EMP003", first_name="Mia")
    assert registry.summary(1).total_employees == 2
    assert registry.summary(2).total_employees == 1

    registry.close()
    assert container.notifier.subscriber_count() == 0
