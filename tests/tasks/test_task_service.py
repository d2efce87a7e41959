from __future__ import annotations

from datetime import date

import pytest

from src.nexhr.nexhr.core.context import TenantContext
from src.nexhr.nexhr.core.enums import TaskPriority, TaskStatus
from src.nexhr.nexhr.core.exceptions import NotFoundError, ValidationError
from tests.fakes import in_memory_container, make_employee

ADMIN = TenantContext(customer_id=1, employee_id=1)
WORKER = TenantContext(customer_id=1, employee_id=2)
TODAY = date(2025, 3, 10)


@pytest.fixture
def service():
    return in_memory_container(employees=[make_employee(1), make_employee(2), make_employee(3)]).task_service


def test_add_task_records_creator_and_defaults(service):
    task = service.get_task(ADMIN, service.add_task(ADMIN, title="Write onboarding guide", assigned_to="2"))

    assert (task.status, task.priority) == (TaskStatus.TODO, TaskPriority.MEDIUM)
    assert (task.created_by, task.assigned_to) == (1, 2)


def test_add_task_validation(service):
    with pytest.raises(ValidationError):
        service.add_task(ADMIN, title="  ")
    with pytest.raises(ValidationError):
        service.add_task(ADMIN, title="Audit", priority="Urgent")
    with pytest.raises(NotFoundError):
        service.add_task(ADMIN, title="Audit", assigned_to=99)


def test_assignee_can_move_status_but_others_cannot(service):
    task_id = service.add_task(ADMIN, title="Audit", assigned_to=2)

    task = service.set_status(WORKER, task_id, "in progress", comments="Started on the ledger")
    assert (task.status, task.comments) == (TaskStatus.IN_PROGRESS, "Started on the ledger")

    with pytest.raises(ValidationError):
        service.set_status(TenantContext(customer_id=1, employee_id=3), task_id, "Completed")


def test_list_my_tasks_only_returns_own(service):
    mine = service.add_task(ADMIN, title="Audit", assigned_to=2)
    service.add_task(ADMIN, title="Payroll run", assigned_to=3)

    assert [t.task_id for t in service.list_my_tasks(WORKER)] == [mine]


def test_upcoming_reminders_window_and_order(service):
    service.add_task(ADMIN, title="Low in two days", priority="Low", deadline=date(2025, 3, 12))
    service.add_task(ADMIN, title="High in two days", priority="High", deadline=date(2025, 3, 12))
    service.add_task(ADMIN, title="Due today", deadline=TODAY)
    service.add_task(ADMIN, title="In a week", deadline=date(2025, 3, 17))
    service.add_task(ADMIN, title="Too far", deadline=date(2025, 3, 18))
    service.add_task(ADMIN, title="Overdue", deadline=date(2025, 3, 9))
    done = service.add_task(ADMIN, title="Done", deadline=date(2025, 3, 11))
    service.update_task(ADMIN, done, status="Completed")

    reminders = service.upcoming_reminders(ADMIN, today=TODAY)

    assert [(r.task.title, r.due_text) for r in reminders] == [
        ("Due today", "Due today"),
        ("High in two days", "Due in 2 days"),
        ("Low in two days", "Due in 2 days"),
        ("In a week", "Due in 1 week"),
    ]
    assert [t.title for t in service.overdue_tasks(ADMIN, today=TODAY)] == ["Overdue"]


def test_task_summary_counts(service):
    a = service.add_task(ADMIN, title="A", deadline=date(2025, 3, 1))
    b = service.add_task(ADMIN, title="B")
    service.add_task(ADMIN, title="C")
    service.update_task(ADMIN, a, status="In Progress")
    service.update_task(ADMIN, b, status="Completed")

    s = service.task_summary(ADMIN, today=TODAY)

    assert (s.total, s.todo, s.in_progress, s.completed, s.overdue) == (3, 1, 1, 1, 1)


def test_delete_task(service):
    task_id = service.add_task(ADMIN, title="Audit")

    service.delete_task(ADMIN, task_id)

    with pytest.raises(NotFoundError):
        service.get_task(ADMIN, task_id)
