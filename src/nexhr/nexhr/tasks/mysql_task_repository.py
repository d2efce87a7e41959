from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import TaskPriority, TaskStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, retry_read
from .model import Task
from .repository import TaskRepository

_COLUMNS = """
    task_id, customer_id, task_title, description, status, priority,
    deadline, assigned_to, created_by, comments, resources
"""


def _optional_id(value: Any) -> Optional[int]:
    return int(value) if value is not None else None


def _row_to_task(r: dict[str, Any]) -> Task:
    return Task(
        task_id=int(r["task_id"]),
        customer_id=int(r["customer_id"]),
        title=r["task_title"],
        status=TaskStatus(r["status"]),
        priority=TaskPriority(r["priority"]),
        description=r.get("description") or "",
        deadline=r.get("deadline"),
        assigned_to=_optional_id(r.get("assigned_to")),
        created_by=_optional_id(r.get("created_by")),
        comments=r.get("comments") or "",
        resources=r.get("resources") or "",
    )


class MySQLTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, task: Task) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO tasks(
                    customer_id, task_title, description, status, priority,
                    deadline, assigned_to, created_by, comments, resources
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(task.customer_id),
                    task.title,
                    task.description,
                    task.status.value,
                    task.priority.value,
                    task.deadline,
                    task.assigned_to,
                    task.created_by,
                    task.comments,
                    task.resources,
                ),
            )
            return int(cur.lastrowid)

    @retry_read
    def get_by_id(self, customer_id: int, task_id: int) -> Optional[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM tasks WHERE customer_id=%s AND task_id=%s",
                (int(customer_id), int(task_id)),
            )
            r = fetchone(cur)
            return _row_to_task(r) if r else None

    @retry_read
    def list_tasks(
        self,
        customer_id: int,
        *,
        status: Optional[TaskStatus] = None,
        assigned_to: Optional[int] = None,
    ) -> Sequence[Task]:
        clauses = ["customer_id=%s"]
        params: list[object] = [int(customer_id)]

        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if assigned_to is not None:
            clauses.append("assigned_to=%s")
            params.append(int(assigned_to))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM tasks
                WHERE {where}
                ORDER BY deadline IS NULL, deadline, task_id
                """,
                tuple(params),
            )
            return [_row_to_task(r) for r in fetchall(cur)]

    def update(self, task: Task) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE tasks
                SET task_title=%s, description=%s, status=%s, priority=%s, deadline=%s,
                    assigned_to=%s, comments=%s, resources=%s
                WHERE customer_id=%s AND task_id=%s
                """,
                (
                    task.title,
                    task.description,
                    task.status.value,
                    task.priority.value,
                    task.deadline,
                    task.assigned_to,
                    task.comments,
                    task.resources,
                    int(task.customer_id),
                    int(task.task_id),
                ),
            )
            return cur.rowcount > 0

    def delete(self, customer_id: int, task_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM tasks WHERE customer_id=%s AND task_id=%s",
                (int(customer_id), int(task_id)),
            )
            return cur.rowcount > 0
