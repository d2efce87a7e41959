from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import TaskStatus
from .model import Task


class TaskRepository(Protocol):
    def create(self, task: Task) -> int:
        """Insert ``task`` (its ``task_id`` is ignored) and return the new id."""
        raise NotImplementedError

    def get_by_id(self, customer_id: int, task_id: int) -> Optional[Task]:
        raise NotImplementedError

    def list_tasks(
        self,
        customer_id: int,
        *,
        status: Optional[TaskStatus] = None,
        assigned_to: Optional[int] = None,
    ) -> Sequence[Task]:
        """Tasks ordered by deadline (undated last), then id."""
        raise NotImplementedError

    def update(self, task: Task) -> bool:
        raise NotImplementedError

    def delete(self, customer_id: int, task_id: int) -> bool:
        raise NotImplementedError
