from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import TaskPriority, TaskStatus

PRIORITY_RANK = {TaskPriority.HIGH: 0, TaskPriority.MEDIUM: 1, TaskPriority.LOW: 2}


@dataclass(frozen=True)
class Task:
    task_id: int
    customer_id: int
    title: str
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    description: str = ""
    deadline: Optional[date] = None
    assigned_to: Optional[int] = None
    created_by: Optional[int] = None
    comments: str = ""
    resources: str = ""

    @property
    def is_open(self) -> bool:
        return self.status != TaskStatus.COMPLETED


@dataclass(frozen=True)
class Reminder:
    task: Task
    days_left: int

    @property
    def due_text(self) -> str:
        if self.days_left == 0:
            return "Due today"
        if self.days_left == 1:
            return "Due tomorrow"
        if self.days_left % 7 == 0:
            weeks = self.days_left // 7
            return f"Due in {weeks} week" + ("s" if weeks > 1 else "")
        return f"Due in {self.days_left} days"


@dataclass(frozen=True)
class TaskSummary:
    total: int = 0
    todo: int = 0
    in_progress: int = 0
    completed: int = 0
    overdue: int = 0
