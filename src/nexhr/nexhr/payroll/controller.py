from __future__ import annotations

from dataclasses import asdict
from datetime import date

from flask import Flask, jsonify, request

from ..common.web import admin_required, current_context, date_arg, date_field, int_arg, json_body, json_errors, tenant_required
from ..container import Container
from ..core.exceptions import ValidationError
from .model import PayslipRecord


def payslip_to_dict(p: PayslipRecord) -> dict:
    return {
        "payslip_id": p.payslip_id,
        "employee_id": p.employee_id,
        "period": p.period,
        "month": p.month,
        "year": p.year,
        "amount": p.amount,
        "generated_at": p.generated_at.strftime("%Y-%m-%d %H:%M"),
    }


def _period():
    today = date.today()
    try:
        year = int(request.args.get("year") or today.year)
        month = int(request.args.get("month") or today.month)
    except ValueError:
        raise ValidationError("year and month must be numbers")
    return year, month


def register(app: Flask, container: Container) -> None:
    service = container.payroll_service

    @app.route("/api/payroll/salaries", methods=["GET"], endpoint="payroll_salaries")
    @admin_required
    @json_errors
    def list_salaries():
        rows = service.list_salaries(current_context(), on_date=date_arg("on"))
        return jsonify({"success": True, "salaries": rows})

    @app.route("/api/payroll/salaries/<int:employee_id>", methods=["PUT"], endpoint="payroll_salary_upsert")
    @admin_required
    @json_errors
    def upsert_salary(employee_id: int):
        data = json_body()
        salary_id = service.upsert_salary(
            current_context(),
            employee_id=employee_id,
            allowances=data.get("allowances") or {},
            deductions=data.get("deductions") or {},
            effective_date=date_field(data, "effective_date", required=False),
        )
        return jsonify({"success": True, "salary_id": salary_id})

    @app.route("/api/payroll/salaries/<int:employee_id>", methods=["GET"], endpoint="payroll_salary_get")
    @admin_required
    @json_errors
    def get_salary(employee_id: int):
        s = service.get_salary(current_context(), employee_id, on_date=date_arg("on"))
        return jsonify(
            {
                "success": True,
                "salary": {
                    "salary_id": s.salary_id,
                    "employee_id": s.employee_id,
                    "allowances": asdict(s.allowances),
                    "deductions": asdict(s.deductions),
                    "gross": s.allowances.gross,
                    "total_deductions": s.deductions.total,
                    "effective_date": s.effective_date.strftime("%Y-%m-%d"),
                },
            }
        )

    @app.route("/api/payroll/stats", methods=["GET"], endpoint="payroll_stats")
    @admin_required
    @json_errors
    def stats():
        s = service.salary_stats(current_context(), on_date=date_arg("on"))
        return jsonify(
            {
                "success": True,
                "total_employees": s.total_employees,
                "total_salary": s.total_salary,
                "average_salary": s.average_salary,
                "department_salaries": [{"name": d.name, "value": d.value} for d in s.department_salaries],
            }
        )

    @app.route("/api/payroll/payslips", methods=["GET"], endpoint="payroll_payslips")
    @admin_required
    @json_errors
    def list_payslips():
        rows = service.list_payslips(current_context(), employee_id=int_arg("employee_id"))
        return jsonify({"success": True, "payslips": [payslip_to_dict(p) for p in rows]})

    @app.route("/api/payroll/payslips/me", methods=["GET"], endpoint="payroll_my_payslips")
    @tenant_required
    @json_errors
    def my_payslips():
        ctx = current_context()
        rows = service.list_payslips(ctx, employee_id=ctx.require_employee())
        return jsonify({"success": True, "payslips": [payslip_to_dict(p) for p in rows]})

    @app.route("/api/payroll/payslips", methods=["POST"], endpoint="payroll_generate")
    @admin_required
    @json_errors
    def generate():
        data = json_body()
        try:
            employee_id = int(data["employee_id"])
            year = int(data["year"])
            month = int(data["month"])
        except (KeyError, TypeError, ValueError):
            raise ValidationError("employee_id, year and month are required")
        payslip = service.generate_payslip(
            current_context(),
            employee_id=employee_id,
            year=year,
            month=month,
            amount=data.get("amount"),
        )
        return jsonify({"success": True, "payslip": payslip_to_dict(payslip)}), 201

    @app.route("/api/payroll/summary", methods=["GET"], endpoint="payroll_summary")
    @admin_required
    @json_errors
    def summary():
        year, month = _period()
        s = service.payslip_summary(current_context(), year=year, month=month)
        return jsonify(
            {
                "success": True,
                "total": s.total,
                "average": s.average,
                "percentage_change": s.percentage_change,
            }
        )
