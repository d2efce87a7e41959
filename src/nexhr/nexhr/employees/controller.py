from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import admin_required, current_context, date_field, int_arg, json_body, json_errors, tenant_required
from ..container import Container
from .model import Employee

_FIELDS = ("employee_code", "first_name", "last_name", "email", "gender", "department_id", "job_title")


def employee_to_dict(e: Employee) -> dict:
    return {
        "employee_id": e.employee_id,
        "employee_code": e.employee_code,
        "first_name": e.first_name,
        "last_name": e.last_name,
        "full_name": e.full_name,
        "email": e.email or "",
        "gender": e.gender or "",
        "department_id": e.department_id,
        "job_title": e.job_title or "",
        "joining_date": e.joining_date.strftime("%Y-%m-%d") if e.joining_date else None,
        "is_active": e.is_active,
    }


def register(app: Flask, container: Container) -> None:
    service = container.employee_service

    @app.route("/api/employees", methods=["GET"], endpoint="employees_list")
    @tenant_required
    @json_errors
    def list_employees():
        rows = service.list_employees(current_context(), department_id=int_arg("department_id"))
        return jsonify({"success": True, "employees": [employee_to_dict(e) for e in rows]})

    @app.route("/api/employees/<int:employee_id>", methods=["GET"], endpoint="employees_get")
    @tenant_required
    @json_errors
    def get_employee(employee_id: int):
        return jsonify({"success": True, "employee": employee_to_dict(service.get_employee(current_context(), employee_id))})

    @app.route("/api/employees/code-exists", methods=["GET"], endpoint="employees_code_exists")
    @admin_required
    @json_errors
    def code_exists():
        code = request.args.get("code", "")
        return jsonify({"success": True, "exists": service.employee_code_exists(current_context(), code)})

    @app.route("/api/employees", methods=["POST"], endpoint="employees_create")
    @admin_required
    @json_errors
    def create_employee():
        data = json_body()
        employee_id = service.create_employee(
            current_context(),
            **{k: data.get(k) for k in _FIELDS},
            joining_date=date_field(data, "joining_date", required=False),
        )
        return jsonify({"success": True, "employee_id": employee_id}), 201

    @app.route("/api/employees/<int:employee_id>", methods=["PUT"], endpoint="employees_update")
    @admin_required
    @json_errors
    def update_employee(employee_id: int):
        data = json_body()
        changes = {k: data[k] for k in _FIELDS + ("is_active",) if k in data}
        if "joining_date" in data:
            changes["joining_date"] = date_field(data, "joining_date", required=False)
        emp = service.update_employee(current_context(), employee_id, **changes)
        return jsonify({"success": True, "employee": employee_to_dict(emp)})

    @app.route("/api/employees/<int:employee_id>", methods=["DELETE"], endpoint="employees_delete")
    @admin_required
    @json_errors
    def delete_employee(employee_id: int):
        service.delete_employee(current_context(), employee_id)
        return jsonify({"success": True})

    @app.route("/api/departments", methods=["GET"], endpoint="departments_list")
    @tenant_required
    @json_errors
    def list_departments():
        rows = service.list_departments(current_context())
        return jsonify(
            {
                "success": True,
                "departments": [{"department_id": d.department_id, "department_name": d.department_name} for d in rows],
            }
        )

    @app.route("/api/departments", methods=["POST"], endpoint="departments_create")
    @admin_required
    @json_errors
    def create_department():
        department_id = service.create_department(current_context(), json_body().get("department_name", ""))
        return jsonify({"success": True, "department_id": department_id}), 201
