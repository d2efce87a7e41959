from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.validators import require_choice
from ..common.web import (
    admin_required,
    current_context,
    date_field,
    int_arg,
    is_admin,
    json_body,
    json_errors,
    tenant_required,
)
from ..container import Container
from ..core.enums import TaskStatus
from .service import reminder_to_dict, task_to_dict

_FIELDS = ("title", "description", "priority", "assigned_to", "resources")


def _status_arg():
    raw = (request.args.get("status") or "").strip()
    return require_choice(TaskStatus, raw, "task status") if raw else None


def register(app: Flask, container: Container) -> None:
    service = container.task_service

    @app.route("/api/tasks", methods=["GET"], endpoint="tasks_list")
    @admin_required
    @json_errors
    def list_tasks():
        rows = service.list_tasks(current_context(), status=_status_arg(), assigned_to=int_arg("assigned_to"))
        return jsonify({"success": True, "tasks": [task_to_dict(t) for t in rows]})

    @app.route("/api/tasks/me", methods=["GET"], endpoint="tasks_mine")
    @tenant_required
    @json_errors
    def my_tasks():
        rows = service.list_my_tasks(current_context(), status=_status_arg())
        return jsonify({"success": True, "tasks": [task_to_dict(t) for t in rows]})

    @app.route("/api/tasks/reminders", methods=["GET"], endpoint="tasks_reminders")
    @tenant_required
    @json_errors
    def reminders():
        ctx = current_context()
        assigned_to = None if is_admin() else ctx.require_employee()
        days = int_arg("days")
        kwargs = {"within_days": days} if days is not None else {}
        rows = service.upcoming_reminders(ctx, assigned_to=assigned_to, **kwargs)
        return jsonify({"success": True, "reminders": [reminder_to_dict(r) for r in rows]})

    @app.route("/api/tasks/summary", methods=["GET"], endpoint="tasks_summary")
    @tenant_required
    @json_errors
    def summary():
        ctx = current_context()
        s = service.task_summary(ctx, assigned_to=None if is_admin() else ctx.require_employee())
        return jsonify(
            {
                "success": True,
                "summary": {
                    "total": s.total,
                    "todo": s.todo,
                    "in_progress": s.in_progress,
                    "completed": s.completed,
                    "overdue": s.overdue,
                },
            }
        )

    @app.route("/api/tasks/<int:task_id>", methods=["GET"], endpoint="tasks_get")
    @tenant_required
    @json_errors
    def get_task(task_id: int):
        return jsonify({"success": True, "task": task_to_dict(service.get_task(current_context(), task_id))})

    @app.route("/api/tasks", methods=["POST"], endpoint="tasks_create")
    @admin_required
    @json_errors
    def add_task():
        data = json_body()
        task_id = service.add_task(
            current_context(),
            **{k: data.get(k) for k in _FIELDS},
            deadline=date_field(data, "deadline", required=False),
        )
        return jsonify({"success": True, "task_id": task_id}), 201

    @app.route("/api/tasks/<int:task_id>", methods=["PUT"], endpoint="tasks_update")
    @admin_required
    @json_errors
    def update_task(task_id: int):
        data = json_body()
        changes = {k: data[k] for k in _FIELDS + ("status", "comments") if k in data}
        if "deadline" in data:
            changes["deadline"] = date_field(data, "deadline", required=False)
        task = service.update_task(current_context(), task_id, **changes)
        return jsonify({"success": True, "task": task_to_dict(task)})

    @app.route("/api/tasks/<int:task_id>/status", methods=["POST"], endpoint="tasks_set_status")
    @tenant_required
    @json_errors
    def set_status(task_id: int):
        data = json_body()
        task = service.set_status(current_context(), task_id, data.get("status"), comments=data.get("comments"))
        return jsonify({"success": True, "task": task_to_dict(task)})

    @app.route("/api/tasks/<int:task_id>", methods=["DELETE"], endpoint="tasks_delete")
    @admin_required
    @json_errors
    def delete_task(task_id: int):
        service.delete_task(current_context(), task_id)
        return jsonify({"success": True})
