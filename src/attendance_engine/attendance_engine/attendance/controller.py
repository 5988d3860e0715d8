from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request

from ..common.http import api_errors, error_response, json_body
from ..common.validators import require_date
from ..core.enums import Origin, PunchAction
from ..container import Container
from ..payroll.service import pay_period_bounds


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/punch", methods=["POST"], endpoint="api_punch")
    @api_errors
    def api_punch():
        data = json_body(request)
        result = container.reconciler.reconcile(
            data.get("user_key") or data.get("zk_id"),
            data.get("date") or data.get("log_date"),
            data.get("time"),
            data.get("origin") or Origin.DEVICE.value,
        )
        return jsonify({"success": True, **result.to_dict()})

    @app.route("/api/attendance/punches", methods=["POST"], endpoint="api_punches")
    @api_errors
    def api_punches():
        """Device-poll batch: {"attendance": [{zk_id, log_date, time}, ...]}."""
        data = json_body(request)
        entries = data.get("attendance")
        if not isinstance(entries, list) or not entries:
            return error_response("No attendance data provided", 400)

        results = container.reconciler.reconcile_many(entries, origin=data.get("origin") or Origin.DEVICE.value)
        return jsonify(
            {
                "success": True,
                "processed": len(results),
                "failed": sum(1 for r in results if r.action == PunchAction.ERROR),
                "results": [r.to_dict() for r in results],
            }
        )

    @app.route("/api/attendance/import", methods=["POST"], endpoint="api_import")
    @api_errors
    def api_import():
        data = json_body(request)
        rows = data.get("rows")
        if not isinstance(rows, list):
            return error_response("rows must be a list", 400)
        if data.get("format") == "punches":
            report = container.importer.import_punches(rows, job_id=data.get("job_id"), policy=data.get("policy"))
        else:
            report = container.importer.import_rows(rows, job_id=data.get("job_id"), policy=data.get("policy"))
        payload = report.to_dict()
        payload["success"] = payload["status"] != "error"
        return jsonify(payload)

    @app.route("/api/attendance/import/<job_id>", methods=["GET"], endpoint="api_import_progress")
    def api_import_progress(job_id: str):
        progress = container.progress.get(job_id)
        if progress is None:
            return error_response("import job not found", 404)
        return jsonify({"success": True, **progress.to_dict()})

    @app.route("/api/attendance/import/<job_id>/cancel", methods=["POST"], endpoint="api_import_cancel")
    def api_import_cancel(job_id: str):
        if not container.progress.request_cancel(job_id):
            return error_response("import job not found or already finished", 404)
        return jsonify({"success": True, "job_id": job_id})

    @app.route("/api/users/<user_key>/metrics", methods=["GET"], endpoint="api_daily_metrics")
    @api_errors
    def api_daily_metrics(user_key: str):
        work_date = request.args.get("date") or date.today().isoformat()
        metrics = container.payroll_service.compute_daily_metrics(work_date, user_key)
        return jsonify({"success": True, "data": metrics.to_dict()})

    @app.route("/api/users/<user_key>/summary", methods=["GET"], endpoint="api_period_summary")
    @api_errors
    def api_period_summary(user_key: str):
        start_s, end_s = request.args.get("start"), request.args.get("end")
        if start_s and end_s:
            start, end = require_date(start_s, "start"), require_date(end_s, "end")
        else:
            anchor = require_date(start_s, "start") if start_s else date.today()
            start, end = pay_period_bounds(anchor)

        report = container.payroll_service.build_period_report(user_key, start, end)
        return jsonify({"success": True, "data": report.to_dict()})
