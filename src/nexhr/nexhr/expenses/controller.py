from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.validators import require_choice
from ..common.web import admin_required, current_context, date_arg, date_field, json_body, json_errors, tenant_required
from ..container import Container
from ..core.enums import RequestStatus
from .service import expense_to_dict


def register(app: Flask, container: Container) -> None:
    service = container.expense_service

    @app.route("/api/expenses", methods=["POST"], endpoint="expenses_submit")
    @tenant_required
    @json_errors
    def submit():
        data = json_body()
        expense_id = service.submit_expense(
            current_context(),
            description=data.get("description", ""),
            category=data.get("category"),
            amount=data.get("amount"),
            expense_date=date_field(data, "date", required=False),
            bill_path=data.get("bill_path"),
        )
        return jsonify({"success": True, "expense_id": expense_id}), 201

    @app.route("/api/expenses/me", methods=["GET"], endpoint="expenses_mine")
    @tenant_required
    @json_errors
    def my_expenses():
        rows = service.list_my_expenses(current_context())
        return jsonify({"success": True, "expenses": [expense_to_dict(e) for e in rows]})

    @app.route("/api/expenses", methods=["GET"], endpoint="expenses_list")
    @admin_required
    @json_errors
    def list_expenses():
        raw = (request.args.get("status") or "").strip()
        status = require_choice(RequestStatus, raw, "request status") if raw else None
        rows = service.list_expenses(current_context(), status=status, start=date_arg("start"), end=date_arg("end"))
        return jsonify({"success": True, "expenses": [expense_to_dict(e) for e in rows]})

    @app.route("/api/expenses/categories", methods=["GET"], endpoint="expenses_categories")
    @admin_required
    @json_errors
    def categories():
        rows = service.expense_categories(current_context(), start=date_arg("start"), end=date_arg("end"))
        return jsonify(
            {
                "success": True,
                "categories": [{"name": c.name, "count": c.count, "amount": c.amount} for c in rows],
            }
        )

    @app.route("/api/expenses/<int:expense_id>/approve", methods=["POST"], endpoint="expenses_approve")
    @admin_required
    @json_errors
    def approve(expense_id: int):
        service.approve_expense(current_context(), expense_id)
        return jsonify({"success": True})

    @app.route("/api/expenses/<int:expense_id>/reject", methods=["POST"], endpoint="expenses_reject")
    @admin_required
    @json_errors
    def reject(expense_id: int):
        service.reject_expense(current_context(), expense_id)
        return jsonify({"success": True})

    @app.route("/api/expenses/<int:expense_id>", methods=["DELETE"], endpoint="expenses_withdraw")
    @tenant_required
    @json_errors
    def withdraw(expense_id: int):
        service.withdraw_expense(current_context(), expense_id)
        return jsonify({"success": True})
