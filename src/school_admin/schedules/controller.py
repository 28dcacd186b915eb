from __future__ import annotations

from flask import Flask, jsonify, request

from ..access.guard import make_permission_required
from ..access.policy import SCHEDULES_READ, SCHEDULES_WRITE
from ..common.http import domain_error_response, json_body, server_error_response
from ..common.logging import get_logger
from ..container import Container
from ..core.exceptions import DomainError, StorageError

log = get_logger(__name__)

_FIELDS = {
    "classId": "class_id",
    "subjectId": "subject_id",
    "teacherId": "teacher_id",
    "academicYearId": "academic_year_id",
    "dayOfWeek": "day_of_week",
    "startTime": "start_time",
    "endTime": "end_time",
    "room": "room",
}


def register(app: Flask, container: Container) -> None:
    permission_required = make_permission_required(container.permissions)
    service = container.schedule_service

    @app.route("/api/schedules", methods=["GET"], endpoint="api_schedules")
    @permission_required(SCHEDULES_READ)
    def api_schedules():
        try:
            student_id = request.args.get("studentId")
            teacher_id = request.args.get("teacherId")
            if student_id:
                slots = service.list_for_student(student_id)
            elif teacher_id:
                slots = service.list_for_teacher(teacher_id)
            else:
                slots = service.list_all(academic_year_id=request.args.get("academicYearId") or None)
            return jsonify([s.to_dict() for s in slots]), 200
        except DomainError as e:
            return domain_error_response(e)
        except StorageError:
            log.exception("schedules_list_failed")
            return server_error_response("Failed to fetch schedules")

    @app.route("/api/schedules", methods=["POST"], endpoint="api_schedules_create")
    @permission_required(SCHEDULES_WRITE)
    def api_schedules_create():
        body = json_body()
        try:
            slot = service.create(**{name: body.get(key) for key, name in _FIELDS.items()})
            return jsonify(slot.to_dict()), 201
        except DomainError as e:
            return domain_error_response(e)
        except StorageError:
            log.exception("schedule_create_failed")
            return server_error_response("Failed to create schedule")

    @app.route("/api/schedules/<schedule_id>", methods=["PUT"], endpoint="api_schedules_update")
    @permission_required(SCHEDULES_WRITE)
    def api_schedules_update(schedule_id: str):
        body = json_body()
        try:
            slot = service.update(schedule_id, **{name: body[key] for key, name in _FIELDS.items() if key in body})
            return jsonify(slot.to_dict()), 200
        except DomainError as e:
            return domain_error_response(e)
        except StorageError:
            log.exception("schedule_update_failed", schedule_id=schedule_id)
            return server_error_response("Failed to update schedule")

    @app.route("/api/schedules/<schedule_id>", methods=["DELETE"], endpoint="api_schedules_delete")
    @permission_required(SCHEDULES_WRITE)
    def api_schedules_delete(schedule_id: str):
        try:
            service.delete(schedule_id)
            return jsonify({"id": schedule_id}), 200
        except DomainError as e:
            return domain_error_response(e)
        except StorageError:
            log.exception("schedule_delete_failed", schedule_id=schedule_id)
            return server_error_response("Failed to delete schedule")
