from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.validators import require_choice
from ..common.web import admin_required, current_context, date_field, int_arg, json_body, json_errors, tenant_required
from ..container import Container
from ..core.enums import AssetStatus
from .service import asset_to_dict

_FIELDS = ("name", "asset_type", "serial_number", "status", "value", "employee_id", "bill_path")


def register(app: Flask, container: Container) -> None:
    service = container.asset_service

    @app.route("/api/assets", methods=["GET"], endpoint="assets_list")
    @admin_required
    @json_errors
    def list_assets():
        raw = (request.args.get("status") or "").strip()
        status = require_choice(AssetStatus, raw, "asset status") if raw else None
        rows = service.list_assets(current_context(), status=status, employee_id=int_arg("employee_id"))
        return jsonify({"success": True, "assets": [asset_to_dict(a) for a in rows]})

    @app.route("/api/assets/me", methods=["GET"], endpoint="assets_mine")
    @tenant_required
    @json_errors
    def my_assets():
        rows = service.list_my_assets(current_context())
        return jsonify({"success": True, "assets": [asset_to_dict(a) for a in rows]})

    @app.route("/api/assets/stats", methods=["GET"], endpoint="assets_stats")
    @admin_required
    @json_errors
    def asset_stats():
        s = service.asset_stats(current_context())
        return jsonify(
            {
                "success": True,
                "stats": {
                    "total": s.total,
                    "total_value": s.total_value,
                    "assigned": s.assigned,
                    "available": s.available,
                    "in_maintenance": s.in_maintenance,
                    "assigned_pct": s.share(s.assigned),
                    "available_pct": s.share(s.available),
                    "in_maintenance_pct": s.share(s.in_maintenance),
                },
            }
        )

    @app.route("/api/assets/<int:asset_id>", methods=["GET"], endpoint="assets_get")
    @admin_required
    @json_errors
    def get_asset(asset_id: int):
        return jsonify({"success": True, "asset": asset_to_dict(service.get_asset(current_context(), asset_id))})

    @app.route("/api/assets", methods=["POST"], endpoint="assets_create")
    @admin_required
    @json_errors
    def create_asset():
        data = json_body()
        asset_id = service.create_asset(
            current_context(),
            **{k: data.get(k) for k in _FIELDS},
            purchase_date=date_field(data, "purchase_date", required=False),
        )
        return jsonify({"success": True, "asset_id": asset_id}), 201

    @app.route("/api/assets/<int:asset_id>", methods=["PUT"], endpoint="assets_update")
    @admin_required
    @json_errors
    def update_asset(asset_id: int):
        data = json_body()
        changes = {k: data[k] for k in _FIELDS if k in data}
        if "purchase_date" in data:
            changes["purchase_date"] = date_field(data, "purchase_date", required=False)
        asset = service.update_asset(current_context(), asset_id, **changes)
        return jsonify({"success": True, "asset": asset_to_dict(asset)})

    @app.route("/api/assets/<int:asset_id>", methods=["DELETE"], endpoint="assets_delete")
    @admin_required
    @json_errors
    def delete_asset(asset_id: int):
        service.delete_asset(current_context(), asset_id)
        return jsonify({"success": True})
