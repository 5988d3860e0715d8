from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import api_errors, error_response, json_body
from ..common.validators import require_date
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/schedule-groups", methods=["POST"], endpoint="api_create_schedule_group")
    @api_errors
    def api_create_schedule_group():
        data = json_body(request)
        group_id = container.schedule_service.create_group(data.get("name"))
        return jsonify({"success": True, "id": group_id}), 201

    @app.route("/api/schedule-groups", methods=["GET"], endpoint="api_list_schedule_groups")
    @api_errors
    def api_list_schedule_groups():
        page = container.schedule_service.list_groups(request.args.get("page", 1))
        return jsonify({"success": True, **page})

    @app.route("/api/schedule-groups/<int:sid>", methods=["DELETE"], endpoint="api_delete_schedule_group")
    @api_errors
    def api_delete_schedule_group(sid: int):
        if not container.schedule_service.delete_group(sid):
            return error_response(f"schedule group {sid} not found", 404)
        return jsonify({"success": True})

    @app.route("/api/schedule-groups/<int:sid>/overrides", methods=["PUT"], endpoint="api_set_override")
    @api_errors
    def api_set_override(sid: int):
        data = json_body(request)
        override_id = container.schedule_service.set_override(
            schedule_group_id=sid,
            work_date=data.get("schedule_date"),
            start=data.get("work_schedule_start"),
            end=data.get("work_schedule_end"),
        )
        return jsonify({"success": True, "id": override_id})

    @app.route("/api/schedule-groups/<int:sid>/calendar/<int:year>/<int:month>", methods=["GET"], endpoint="api_month_calendar")
    @api_errors
    def api_month_calendar(sid: int, year: int, month: int):
        days = container.schedule_service.month_calendar(schedule_group_id=sid, year=year, month=month)
        return jsonify({"success": True, "data": days, "month": month, "year": year})

    @app.route("/api/users/<user_key>/schedule", methods=["GET"], endpoint="api_resolved_schedule")
    @api_errors
    def api_resolved_schedule(user_key: str):
        work_date = require_date(request.args.get("date"), "date")
        return jsonify({"success": True, "data": container.schedule_resolver.resolve(user_key, work_date).to_dict()})
