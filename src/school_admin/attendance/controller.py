from __future__ import annotations

from flask import Flask, jsonify, request

from ..access.guard import make_permission_required
from ..access.policy import ATTENDANCE_READ, ATTENDANCE_WRITE, TEACHER_ATTENDANCE_WRITE
from ..common.http import domain_error_response, json_body, server_error_response
from ..common.logging import get_logger
from ..container import Container
from ..core.exceptions import DomainError, StorageError
from .model import BulkResult

log = get_logger(__name__)


def _bulk_response(result: BulkResult, what: str):
    if result.all_conflict:
        return (
            jsonify(
                {
                    "error": f"All selected {what} already have attendance recorded for this date",
                    "created": 0,
                    "alreadyExists": result.already_existing_count,
                    "conflicting": result.already_existing_subject_ids,
                }
            ),
            409,
        )
    return jsonify(result.to_dict()), 201


def register(app: Flask, container: Container) -> None:
    permission_required = make_permission_required(container.permissions)
    service = container.attendance_service

    @app.route("/api/teacher-attendance", methods=["GET"], endpoint="api_teacher_attendance")
    @permission_required(ATTENDANCE_READ)
    def api_teacher_attendance():
        try:
            records = service.list_teacher_attendance(
                date=request.args.get("date") or None,
                teacher_id=request.args.get("teacherId") or None,
            )
            return jsonify([r.to_dict() for r in records]), 200
        except DomainError as e:
            return domain_error_response(e)
        except StorageError:
            log.exception("teacher_attendance_list_failed")
            return server_error_response("Failed to fetch attendance")

    @app.route("/api/teacher-attendance", methods=["POST"], endpoint="api_teacher_attendance_create")
    @permission_required(TEACHER_ATTENDANCE_WRITE)
    def api_teacher_attendance_create():
        body = json_body()
        try:
            record = service.create_teacher_attendance(
                teacher_id=body.get("teacherId"),
                date=body.get("date"),
                created_by=body.get("createdBy"),
                status=body.get("status"),
                notes=body.get("notes"),
                checkin_time=body.get("checkinTime"),
            )
            return jsonify(record.to_dict()), 201
        except DomainError as e:
            return domain_error_response(e)
        except StorageError:
            log.exception("teacher_attendance_create_failed")
            return server_error_response("Failed to create attendance")

    @app.route("/api/teacher-attendance/<attendance_id>", methods=["PUT"], endpoint="api_teacher_attendance_update")
    @permission_required(TEACHER_ATTENDANCE_WRITE)
    def api_teacher_attendance_update(attendance_id: str):
        body = json_body()
        try:
            record = service.update_teacher_attendance(
                attendance_id,
                status=body.get("status"),
                notes=body.get("notes"),
                checkout_time=body.get("checkoutTime"),
            )
            return jsonify(record.to_dict()), 200
        except DomainError as e:
            return domain_error_response(e)
        except StorageError:
            log.exception("teacher_attendance_update_failed", attendance_id=attendance_id)
            return server_error_response("Failed to update attendance")

    @app.route("/api/teacher-attendance/<attendance_id>", methods=["DELETE"], endpoint="api_teacher_attendance_delete")
    @permission_required(TEACHER_ATTENDANCE_WRITE)
    def api_teacher_attendance_delete(attendance_id: str):
        try:
            service.delete_teacher_attendance(attendance_id)
            return jsonify({"id": attendance_id}), 200
        except DomainError as e:
            return domain_error_response(e)
        except StorageError:
            log.exception("teacher_attendance_delete_failed", attendance_id=attendance_id)
            return server_error_response("Failed to delete attendance")

    @app.route("/api/teacher-attendance/bulk", methods=["POST"], endpoint="api_teacher_attendance_bulk")
    @permission_required(TEACHER_ATTENDANCE_WRITE)
    def api_teacher_attendance_bulk():
        body = json_body()
        try:
            result = service.record_teacher_bulk(
                teacher_ids=body.get("teacherIds") or body.get("subjectIds"),
                date=body.get("date"),
                created_by=body.get("createdBy"),
                status=body.get("status"),
                notes=body.get("notes"),
                checkin_time=body.get("checkinTime"),
            )
            return _bulk_response(result, "teachers")
        except DomainError as e:
            return domain_error_response(e)
        except StorageError:
            log.exception("teacher_attendance_bulk_failed")
            return server_error_response("Failed to create bulk attendance records")

    @app.route("/api/attendance", methods=["GET"], endpoint="api_attendance")
    @permission_required(ATTENDANCE_READ)
    def api_attendance():
        try:
            records = service.list_student_attendance(
                request.args.get("scheduleId"),
                date=request.args.get("date") or None,
            )
            return jsonify([r.to_dict() for r in records]), 200
        except DomainError as e:
            return domain_error_response(e)
        except StorageError:
            log.exception("attendance_list_failed")
            return server_error_response("Failed to fetch attendance")

    @app.route("/api/attendance/bulk", methods=["POST"], endpoint="api_attendance_bulk")
    @permission_required(ATTENDANCE_WRITE)
    def api_attendance_bulk():
        body = json_body()
        try:
            result = service.record_student_bulk(
                schedule_id=body.get("scheduleId"),
                student_ids=body.get("studentIds") or body.get("subjectIds"),
                date=body.get("date"),
                created_by=body.get("createdBy"),
                status=body.get("status"),
                notes=body.get("notes"),
            )
            return _bulk_response(result, "students")
        except DomainError as e:
            return domain_error_response(e)
        except StorageError:
            log.exception("attendance_bulk_failed")
            return server_error_response("Failed to create bulk attendance")
