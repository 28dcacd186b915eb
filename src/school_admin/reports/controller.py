from __future__ import annotations

from datetime import date
from typing import Optional

from flask import Flask, jsonify, request

from ..access.guard import make_permission_required
from ..access.policy import REPORTS_READ
from ..common.datetime_utils import parse_iso_date
from ..common.http import domain_error_response, server_error_response
from ..common.logging import get_logger
from ..container import Container
from ..core.exceptions import DomainError, StorageError, ValidationError
from .export import report_csv_bytes

log = get_logger(__name__)


def _arg_date(name: str) -> Optional[date]:
    value = request.args.get(name)
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{name} must be YYYY-MM-DD", field=name)


def register(app: Flask, container: Container) -> None:
    permission_required = make_permission_required(container.permissions)
    service = container.report_service

    @app.route("/api/teacher-attendance/reports", methods=["GET"], endpoint="api_teacher_attendance_reports")
    @permission_required(REPORTS_READ)
    def api_teacher_attendance_reports():
        try:
            data = service.build_teacher_report(start=_arg_date("startDate"), end=_arg_date("endDate"))
            return jsonify(data.summary), 200
        except DomainError as e:
            return domain_error_response(e)
        except StorageError:
            log.exception("teacher_report_failed")
            return server_error_response("Failed to fetch reports")

    @app.route("/api/teacher-attendance/reports.csv", methods=["GET"], endpoint="api_teacher_attendance_reports_csv")
    @permission_required(REPORTS_READ)
    def api_teacher_attendance_reports_csv():
        try:
            start = _arg_date("startDate")
            end = _arg_date("endDate")
            data = service.build_teacher_report(start=start, end=end)
        except DomainError as e:
            return domain_error_response(e)
        except StorageError:
            log.exception("teacher_report_csv_failed")
            return server_error_response("Failed to export reports")

        suffix = f"_{start:%Y%m%d}_{end:%Y%m%d}" if start and end else ""
        return app.response_class(
            report_csv_bytes(data),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename=teacher_attendance{suffix}.csv"},
        )
