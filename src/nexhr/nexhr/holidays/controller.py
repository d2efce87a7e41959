from __future__ import annotations

from datetime import date

from flask import Flask, jsonify

from ..common.web import admin_required, current_context, date_field, int_arg, json_body, json_errors, tenant_required
from ..container import Container
from .service import holiday_to_dict


def register(app: Flask, container: Container) -> None:
    service = container.holiday_service

    @app.route("/api/holidays", methods=["GET"], endpoint="holidays_list")
    @tenant_required
    @json_errors
    def list_holidays():
        year = int_arg("year") or date.today().year
        rows = service.list_holidays(current_context(), year=year)
        return jsonify({"success": True, "holidays": [holiday_to_dict(h) for h in rows]})

    @app.route("/api/holidays", methods=["POST"], endpoint="holidays_add")
    @admin_required
    @json_errors
    def add_holiday():
        data = json_body()
        holiday_id = service.add_holiday(current_context(), holiday_date=date_field(data, "date"), name=data.get("name", ""))
        return jsonify({"success": True, "holiday_id": holiday_id}), 201

    @app.route("/api/holidays/<int:holiday_id>", methods=["DELETE"], endpoint="holidays_delete")
    @admin_required
    @json_errors
    def delete_holiday(holiday_id: int):
        service.delete_holiday(current_context(), holiday_id)
        return jsonify({"success": True})
