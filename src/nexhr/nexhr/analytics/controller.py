from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import admin_required, current_context, json_errors
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/analytics/summary", methods=["GET"], endpoint="analytics_summary")
    @admin_required
    @json_errors
    def summary():
        s = container.live_analytics.summary(current_context().customer_id)
        return jsonify({"success": True, "summary": s.to_dict()})
