from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import admin_required, current_context, date_field, json_body, json_errors, tenant_required
from ..container import Container
from ..core.enums import RequestStatus
from ..core.exceptions import ValidationError
from .service import leave_to_dict


def register(app: Flask, container: Container) -> None:
    service = container.leave_service

    @app.route("/api/leaves", methods=["POST"], endpoint="leaves_apply")
    @tenant_required
    @json_errors
    def apply_leave():
        data = json_body()
        request_id = service.apply_leave(
            current_context(),
            leave_type=data.get("leave_type", ""),
            start_date=date_field(data, "start_date"),
            end_date=date_field(data, "end_date"),
            reason=data.get("reason", ""),
        )
        return jsonify({"success": True, "request_id": request_id}), 201

    @app.route("/api/leaves/me", methods=["GET"], endpoint="leaves_mine")
    @tenant_required
    @json_errors
    def my_leaves():
        rows = service.list_my_leaves(current_context())
        return jsonify({"success": True, "leaves": [leave_to_dict(r) for r in rows]})

    @app.route("/api/leaves", methods=["GET"], endpoint="leaves_list")
    @admin_required
    @json_errors
    def list_leaves():
        raw = (request.args.get("status") or "").strip().upper()
        try:
            status = RequestStatus(raw) if raw else None
        except ValueError:
            raise ValidationError(f"Unknown request status: {raw}")
        rows = service.list_leaves(current_context(), status=status)
        return jsonify({"success": True, "leaves": [leave_to_dict(r) for r in rows]})

    @app.route("/api/leaves/<int:request_id>/approve", methods=["POST"], endpoint="leaves_approve")
    @admin_required
    @json_errors
    def approve(request_id: int):
        service.approve_leave(current_context(), request_id=request_id, admin_note=json_body().get("admin_note", ""))
        return jsonify({"success": True})

    @app.route("/api/leaves/<int:request_id>/reject", methods=["POST"], endpoint="leaves_reject")
    @admin_required
    @json_errors
    def reject(request_id: int):
        service.reject_leave(current_context(), request_id=request_id, admin_note=json_body().get("admin_note", ""))
        return jsonify({"success": True})
