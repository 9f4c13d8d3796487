from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import ErrorCode, PunchAction
from ..core.exceptions import StoreFailureError, ValidationError
from ..reports.service import parse_period
from .model import AttendanceError

_STATUS_BY_CODE = {
    ErrorCode.INVALID_INPUT: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.NO_ACTIVE_SESSION: 409,
    ErrorCode.ACTION_IN_PROGRESS: 409,
}

_MESSAGES = {
    PunchAction.CLOCK_IN: "Clocked in successfully",
    PunchAction.RESUME: "Clock-in resumed",
    PunchAction.CLOCK_OUT: "Clocked out successfully",
}


def error_response(error: AttendanceError):
    status = _STATUS_BY_CODE.get(error.code)
    if status is None:
        status = 503 if error.retryable else 500
    return jsonify({"success": False, **error.to_dict()}), status


def register(app: Flask, container: Container) -> None:
    ledger = container.attendance_service

    def _request_token():
        token = request.headers.get("Idempotency-Key")
        if token:
            return token.strip()
        data = request.get_json(silent=True) or {}
        return (data.get("request_token") or "").strip() or None

    def _record_response(result, action: PunchAction):
        if isinstance(result, AttendanceError):
            return error_response(result)
        return jsonify({"success": True, "message": _MESSAGES[action], "record": result.to_dict()}), 200

    @app.route("/api/attendance/<employee_id>/today", methods=["GET"], endpoint="attendance_today")
    def attendance_today(employee_id: str):
        status = ledger.get_today_status(employee_id)
        if isinstance(status, AttendanceError):
            return error_response(status)
        return jsonify({"success": True, **status.to_dict()}), 200

    @app.route("/api/attendance/<employee_id>/clock-in", methods=["POST"], endpoint="attendance_clock_in")
    def attendance_clock_in(employee_id: str):
        result = ledger.clock_in(employee_id, request_token=_request_token())
        return _record_response(result, PunchAction.CLOCK_IN)

    @app.route("/api/attendance/<employee_id>/resume", methods=["POST"], endpoint="attendance_resume")
    def attendance_resume(employee_id: str):
        result = ledger.resume_clock_in(employee_id, request_token=_request_token())
        return _record_response(result, PunchAction.RESUME)

    @app.route("/api/attendance/<employee_id>/clock-out", methods=["POST"], endpoint="attendance_clock_out")
    def attendance_clock_out(employee_id: str):
        result = ledger.clock_out(employee_id, request_token=_request_token())
        return _record_response(result, PunchAction.CLOCK_OUT)

    @app.route("/api/attendance/<employee_id>/punch", methods=["POST"], endpoint="attendance_punch")
    def attendance_punch(employee_id: str):
        """Auto-detect clock in/out from today's record."""
        result = ledger.punch(employee_id, request_token=_request_token())
        if isinstance(result, AttendanceError):
            return error_response(result)
        return jsonify({"success": True, "message": _MESSAGES[result.action], **result.to_dict()}), 200

    @app.route("/api/attendance/<employee_id>/finalize", methods=["POST"], endpoint="attendance_finalize")
    def attendance_finalize(employee_id: str):
        result = ledger.finalize_day_attendance(employee_id)
        if isinstance(result, AttendanceError):
            return error_response(result)
        return jsonify({"success": True, "record": result.to_dict() if result else None}), 200

    @app.route("/api/attendance/reset", methods=["POST"], endpoint="attendance_reset")
    def attendance_reset():
        summary = ledger.reset_attendance_for_new_day()
        return jsonify({"success": not summary.failures, **summary.to_dict()}), 200

    @app.route("/api/attendance/<employee_id>/history", methods=["GET"], endpoint="attendance_history")
    def attendance_history(employee_id: str):
        try:
            period = parse_period(request.args.get("period"))
            data = container.summary_service.build_summary(employee_id, period=period)
        except ValidationError as e:
            return jsonify({"success": False, "error": ErrorCode.INVALID_INPUT.value, "message": str(e)}), 400
        except StoreFailureError as e:
            return error_response(AttendanceError.from_exception(e))
        return jsonify({"success": True, **data.to_dict()}), 200

    @app.route("/api/attendance/<employee_id>/recent", methods=["GET"], endpoint="attendance_recent")
    def attendance_recent(employee_id: str):
        limit = request.args.get("limit", DEFAULT_HISTORY_LIMIT, type=int)
        if limit is None or limit < 1:
            message = "limit must be a positive integer"
            return jsonify({"success": False, "error": ErrorCode.INVALID_INPUT.value, "message": message}), 400
        try:
            rows = container.summary_service.get_history(employee_id, limit=limit)
        except ValidationError as e:
            return jsonify({"success": False, "error": ErrorCode.INVALID_INPUT.value, "message": str(e)}), 400
        except StoreFailureError as e:
            return error_response(AttendanceError.from_exception(e))
        return jsonify({"success": True, "rows": rows}), 200
