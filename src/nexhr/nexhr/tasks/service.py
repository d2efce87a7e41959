from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import optional_int, optional_text, require_choice, require_non_empty
from ..core.constants import REMINDER_WINDOW_DAYS
from ..core.context import TenantContext
from ..core.enums import ChangeType, TaskPriority, TaskStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..realtime.notifier import ChangeNotifier
from .model import PRIORITY_RANK, Reminder, Task, TaskSummary
from .repository import TaskRepository

logger = logging.getLogger(__name__)

TABLE = "tasks"

_EDITABLE_FIELDS = {"title", "description", "status", "priority", "deadline", "assigned_to", "comments", "resources"}


def task_to_dict(t: Task) -> dict:
    return {
        "task_id": t.task_id,
        "title": t.title,
        "description": t.description,
        "status": t.status.value,
        "priority": t.priority.value,
        "deadline": t.deadline.strftime("%Y-%m-%d") if t.deadline else None,
        "assigned_to": t.assigned_to,
        "created_by": t.created_by,
        "comments": t.comments,
        "resources": t.resources,
    }


def reminder_to_dict(r: Reminder) -> dict:
    return {**task_to_dict(r.task), "days_left": r.days_left, "due_text": r.due_text}


def summarize_tasks(tasks: Sequence[Task], today: date) -> TaskSummary:
    return TaskSummary(
        total=len(tasks),
        todo=sum(1 for t in tasks if t.status == TaskStatus.TODO),
        in_progress=sum(1 for t in tasks if t.status == TaskStatus.IN_PROGRESS),
        completed=sum(1 for t in tasks if t.status == TaskStatus.COMPLETED),
        overdue=sum(1 for t in tasks if t.is_open and t.deadline is not None and t.deadline < today),
    )


class TaskService:
    """Use case: a tenant's task list with deadlines and reminders."""

    def __init__(
        self,
        tasks: TaskRepository,
        employees: EmployeeRepository,
        *,
        notifier: Optional[ChangeNotifier] = None,
    ):
        self._tasks = tasks
        self._employees = employees
        self._notifier = notifier

    def _emit(self, change_type: ChangeType, ctx: TenantContext, task_id: int, **payload) -> None:
        if self._notifier:
            self._notifier.emit(TABLE, change_type, customer_id=ctx.customer_id, record_id=task_id, **payload)

    def _check_assignee(self, ctx: TenantContext, employee_id: Optional[int]) -> None:
        if employee_id is not None and not self._employees.get_by_id(ctx.customer_id, employee_id):
            raise NotFoundError("Employee not found")

    def get_task(self, ctx: TenantContext, task_id: int) -> Task:
        task = self._tasks.get_by_id(ctx.customer_id, int(task_id))
        if not task:
            raise NotFoundError("Task not found")
        return task

    def list_tasks(
        self,
        ctx: TenantContext,
        *,
        status: Optional[TaskStatus] = None,
        assigned_to: Optional[int] = None,
    ) -> Sequence[Task]:
        return self._tasks.list_tasks(ctx.customer_id, status=status, assigned_to=assigned_to)

    def list_my_tasks(self, ctx: TenantContext, *, status: Optional[TaskStatus] = None) -> Sequence[Task]:
        return self._tasks.list_tasks(ctx.customer_id, status=status, assigned_to=ctx.require_employee())

    def add_task(
        self,
        ctx: TenantContext,
        *,
        title: str,
        description: str = "",
        priority=TaskPriority.MEDIUM,
        deadline: Optional[date] = None,
        assigned_to=None,
        resources: str = "",
    ) -> int:
        assignee = optional_int(assigned_to, "Assignee")
        self._check_assignee(ctx, assignee)
        task = Task(
            task_id=0,
            customer_id=ctx.customer_id,
            title=require_non_empty(title, "Task title"),
            status=TaskStatus.TODO,
            priority=require_choice(TaskPriority, priority or TaskPriority.MEDIUM, "priority"),
            description=optional_text(description),
            deadline=deadline,
            assigned_to=assignee,
            created_by=ctx.employee_id,
            resources=optional_text(resources),
        )
        task_id = self._tasks.create(task)
        logger.info("Task %s created for customer %s (assignee %s)", task_id, ctx.customer_id, assignee)
        self._emit(ChangeType.INSERT, ctx, task_id, assigned_to=assignee)
        return task_id

    def update_task(self, ctx: TenantContext, task_id: int, **changes) -> Task:
        current = self.get_task(ctx, task_id)

        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown task fields: {', '.join(sorted(unknown))}")

        if "title" in changes:
            changes["title"] = require_non_empty(changes["title"], "Task title")
        for name in ("description", "comments", "resources"):
            if name in changes:
                changes[name] = optional_text(changes[name])
        if "status" in changes:
            changes["status"] = require_choice(TaskStatus, changes["status"], "task status")
        if "priority" in changes:
            changes["priority"] = require_choice(TaskPriority, changes["priority"], "priority")
        if "assigned_to" in changes:
            changes["assigned_to"] = optional_int(changes["assigned_to"], "Assignee")
            self._check_assignee(ctx, changes["assigned_to"])

        updated = replace(current, **changes)
        if not self._tasks.update(updated):
            raise ValidationError("Updating the task failed")
        self._emit(ChangeType.UPDATE, ctx, current.task_id, assigned_to=updated.assigned_to)
        return updated

    def set_status(self, ctx: TenantContext, task_id: int, status, *, comments: Optional[str] = None) -> Task:
        """Progress update by the assignee or the creator."""
        task = self.get_task(ctx, task_id)
        employee_id = ctx.require_employee()
        if employee_id not in (task.assigned_to, task.created_by):
            raise ValidationError("Only the assignee or the creator can update this task")
        changes = {"status": status}
        if comments is not None:
            changes["comments"] = comments
        return self.update_task(ctx, task.task_id, **changes)

    def delete_task(self, ctx: TenantContext, task_id: int) -> None:
        self.get_task(ctx, task_id)
        if not self._tasks.delete(ctx.customer_id, int(task_id)):
            raise ValidationError("Deleting the task failed")
        logger.info("Deleted task %s for customer %s", task_id, ctx.customer_id)
        self._emit(ChangeType.DELETE, ctx, int(task_id))

    def upcoming_reminders(
        self,
        ctx: TenantContext,
        *,
        today: Optional[date] = None,
        within_days: int = REMINDER_WINDOW_DAYS,
        assigned_to: Optional[int] = None,
    ) -> list[Reminder]:
        """Open tasks due between today and ``within_days`` from now, soonest and most urgent first."""
        today = today or now_local().date()
        out = []
        for t in self._tasks.list_tasks(ctx.customer_id, assigned_to=assigned_to):
            if not t.is_open or t.deadline is None:
                continue
            days_left = (t.deadline - today).days
            if 0 <= days_left <= within_days:
                out.append(Reminder(task=t, days_left=days_left))
        out.sort(key=lambda r: (r.days_left, PRIORITY_RANK[r.task.priority], r.task.task_id))
        return out

    def overdue_tasks(self, ctx: TenantContext, *, today: Optional[date] = None, assigned_to: Optional[int] = None) -> list[Task]:
        today = today or now_local().date()
        return [
            t
            for t in self._tasks.list_tasks(ctx.customer_id, assigned_to=assigned_to)
            if t.is_open and t.deadline is not None and t.deadline < today
        ]

    def task_summary(self, ctx: TenantContext, *, today: Optional[date] = None, assigned_to: Optional[int] = None) -> TaskSummary:
        tasks = self._tasks.list_tasks(ctx.customer_id, assigned_to=assigned_to)
        return summarize_tasks(tasks, today or now_local().date())
