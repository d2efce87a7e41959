from __future__ import annotations

from datetime import date, timedelta

from flask import Flask, Response, jsonify

from ..common.datetime_utils import parse_clock
from ..common.validators import optional_int
from ..common.web import (
    admin_required,
    current_context,
    date_arg,
    date_field,
    int_arg,
    json_body,
    json_errors,
    tenant_required,
)
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..container import Container
from .service import record_to_dict, report_row_to_dict


def _status(value):
    if value in (None, ""):
        return None
    try:
        return AttendanceStatus.parse(value)
    except ValueError:
        raise ValidationError(f"Unknown attendance status: {value}")


def _clock(value):
    if value in (None, ""):
        return None
    try:
        return parse_clock(str(value))
    except ValueError:
        raise ValidationError("Times must be given as HH:MM")


def _range():
    end = date_arg("end", date.today())
    start = date_arg("start", end - timedelta(days=30))
    return start, end


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    @tenant_required
    @json_errors
    def check_in():
        data = json_body()
        rec = service.check_in(current_context(), selfie_path=(data.get("selfie_path") or None))
        return jsonify({"success": True, "record": record_to_dict(rec)}), 201

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="attendance_check_out")
    @tenant_required
    @json_errors
    def check_out():
        rec = service.check_out(current_context())
        return jsonify({"success": True, "record": record_to_dict(rec)})

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @tenant_required
    @json_errors
    def today():
        rec = service.get_today_record(current_context())
        return jsonify({"success": True, "record": record_to_dict(rec) if rec else None})

    @app.route("/api/attendance/me", methods=["GET"], endpoint="attendance_mine")
    @tenant_required
    @json_errors
    def my_records():
        start, end = _range()
        rows = service.list_my_records(current_context(), start=start, end=end)
        return jsonify({"success": True, "records": [report_row_to_dict(r) for r in rows]})

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    @admin_required
    @json_errors
    def list_records():
        start, end = _range()
        rows = service.list_records(current_context(), start=start, end=end, employee_id=int_arg("employee_id"))
        return jsonify({"success": True, "records": [report_row_to_dict(r) for r in rows]})

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_add")
    @admin_required
    @json_errors
    def add_record():
        data = json_body()
        if not data.get("employee_id"):
            raise ValidationError("employee_id is required")
        attendance_id = service.add_record(
            current_context(),
            employee_id=optional_int(data["employee_id"], "employee_id"),
            work_date=date_field(data, "date"),
            check_in=_clock(data.get("check_in")),
            check_out=_clock(data.get("check_out")),
            status=_status(data.get("status")),
            notes=data.get("notes"),
        )
        return jsonify({"success": True, "attendance_id": attendance_id}), 201

    @app.route("/api/attendance/<int:attendance_id>", methods=["PUT"], endpoint="attendance_update")
    @admin_required
    @json_errors
    def update_record(attendance_id: int):
        data = json_body()
        changes = {}
        if "check_in" in data:
            changes["check_in"] = _clock(data["check_in"])
        if "check_out" in data:
            changes["check_out"] = _clock(data["check_out"])
        if "status" in data:
            status = _status(data["status"])
            if status is None:
                raise ValidationError("status cannot be empty")
            changes["status"] = status
        if "notes" in data:
            changes["notes"] = data["notes"]
        rec = service.update_record(current_context(), attendance_id, **changes)
        return jsonify({"success": True, "record": record_to_dict(rec)})

    @app.route("/api/attendance/status", methods=["PUT"], endpoint="attendance_update_status")
    @admin_required
    @json_errors
    def update_status():
        data = json_body()
        status = _status(data.get("status"))
        if status is None or not data.get("employee_id"):
            raise ValidationError("employee_id and status are required")
        rec = service.update_status(
            current_context(),
            employee_id=optional_int(data["employee_id"], "employee_id"),
            work_date=date_field(data, "date"),
            status=status,
        )
        return jsonify({"success": True, "record": record_to_dict(rec)})

    @app.route("/api/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="attendance_delete")
    @admin_required
    @json_errors
    def delete_record(attendance_id: int):
        service.delete_record(current_context(), attendance_id)
        return jsonify({"success": True})

    @app.route("/api/attendance/summary", methods=["GET"], endpoint="attendance_summary")
    @admin_required
    @json_errors
    def daily_summary():
        day = date_arg("date", date.today())
        counts = service.daily_summary(current_context(), day)
        return jsonify(
            {
                "success": True,
                "date": day.strftime("%Y-%m-%d"),
                "present": counts.present,
                "absent": counts.absent,
                "late": counts.late,
            }
        )

    @app.route("/api/attendance/backfill", methods=["POST"], endpoint="attendance_backfill")
    @admin_required
    @json_errors
    def backfill():
        day = date_field(json_body(), "date", required=False) or date.today()
        created = service.backfill_day(current_context(), day)
        return jsonify({"success": True, "created": created})

    @app.route("/api/attendance/report", methods=["GET"], endpoint="attendance_report")
    @admin_required
    @json_errors
    def report():
        start, end = _range()
        data = service.build_report(current_context(), start=start, end=end, employee_id=int_arg("employee_id"))
        return jsonify({"success": True, "rows": data.rows, "summary": data.summary})

    @app.route("/api/attendance/export", methods=["GET"], endpoint="attendance_export")
    @admin_required
    @json_errors
    def export_csv():
        start, end = _range()
        body = service.export_csv(current_context(), start=start, end=end, employee_id=int_arg("employee_id"))
        filename = f"attendance_{start:%Y%m%d}_{end:%Y%m%d}.csv"
        return Response(
            body,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/attendance/settings", methods=["GET"], endpoint="attendance_settings")
    @tenant_required
    @json_errors
    def get_settings():
        s = service.get_settings(current_context())
        return jsonify(
            {
                "success": True,
                "settings": {
                    "work_start_time": s.work_start_time.strftime("%H:%M"),
                    "late_threshold_minutes": s.late_threshold_minutes,
                    "geofencing_enabled": s.geofencing_enabled,
                    "photo_verification_enabled": s.photo_verification_enabled,
                },
            }
        )

    @app.route("/api/attendance/settings", methods=["PUT"], endpoint="attendance_settings_update")
    @admin_required
    @json_errors
    def update_settings():
        data = json_body()
        threshold = data.get("late_threshold_minutes")
        try:
            threshold = int(threshold) if threshold not in (None, "") else None
        except (TypeError, ValueError):
            raise ValidationError("late_threshold_minutes must be a number")
        service.update_settings(
            current_context(),
            work_start_time=_clock(data.get("work_start_time")),
            late_threshold_minutes=threshold,
            geofencing_enabled=data.get("geofencing_enabled"),
            photo_verification_enabled=data.get("photo_verification_enabled"),
        )
        return get_settings()
