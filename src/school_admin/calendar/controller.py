from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request, session

from ..access.guard import make_permission_required
from ..access.policy import CALENDAR_READ, CALENDAR_WRITE
from ..common.datetime_utils import now_local
from ..common.http import domain_error_response, json_body, server_error_response
from ..common.logging import get_logger
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import DomainError, StorageError, ValidationError

log = get_logger(__name__)


def register(app: Flask, container: Container) -> None:
    permission_required = make_permission_required(container.permissions)
    service = container.calendar_service

    def _reference_date() -> date:
        year_s = request.args.get("year")
        if not year_s:
            return now_local(container.tz).date()
        if not year_s.isdigit() or not 1 <= int(year_s) <= 9999:
            raise ValidationError("year must be a four-digit number", field="year")
        return date(int(year_s), 1, 1)

    @app.route("/api/calendar", methods=["GET"], endpoint="api_calendar")
    @permission_required(CALENDAR_READ)
    def api_calendar():
        try:
            reference = _reference_date()
            user_id = str(session["user_id"])
            role = session.get("role")

            if role == Role.STUDENT.value:
                features = service.calendar_for_student(user_id, reference_date=reference)
            elif role == Role.TEACHER.value:
                features = service.calendar_for_teacher(user_id, reference_date=reference)
            else:
                features = service.calendar_events_only(reference_date=reference)

            return jsonify([f.to_dict() for f in features]), 200
        except DomainError as e:
            return domain_error_response(e)
        except StorageError:
            log.exception("calendar_failed")
            return server_error_response("Failed to build calendar")

    @app.route("/api/calendar-events", methods=["GET"], endpoint="api_calendar_events")
    @permission_required(CALENDAR_READ)
    def api_calendar_events():
        try:
            published_only = request.args.get("published") in {"1", "true"}
            events = service.list_events(published_only=published_only)
            return jsonify([e.to_dict() for e in events]), 200
        except StorageError:
            log.exception("calendar_events_list_failed")
            return server_error_response("Failed to fetch calendar events")

    @app.route("/api/calendar-events", methods=["POST"], endpoint="api_calendar_events_create")
    @permission_required(CALENDAR_WRITE)
    def api_calendar_events_create():
        body = json_body()
        try:
            event = service.create_event(
                title=body.get("title"),
                description=body.get("description"),
                event_date=body.get("eventDate"),
                event_type=body.get("eventType"),
                academic_year_id=body.get("academicYearId"),
                is_published=bool(body.get("isPublished", False)),
            )
            return jsonify(event.to_dict()), 201
        except DomainError as e:
            return domain_error_response(e)
        except StorageError:
            log.exception("calendar_event_create_failed")
            return server_error_response("Failed to create calendar event")

    @app.route("/api/calendar-events/<event_id>", methods=["PUT"], endpoint="api_calendar_events_update")
    @permission_required(CALENDAR_WRITE)
    def api_calendar_events_update(event_id: str):
        body = json_body()
        changes = {
            "title": body.get("title"),
            "event_date": body.get("eventDate"),
            "event_type": body.get("eventType"),
            "academic_year_id": body.get("academicYearId"),
            "is_published": body.get("isPublished"),
        }
        if "description" in body:
            changes["description"] = body.get("description")
        try:
            event = service.update_event(event_id, **changes)
            return jsonify(event.to_dict()), 200
        except DomainError as e:
            return domain_error_response(e)
        except StorageError:
            log.exception("calendar_event_update_failed", event_id=event_id)
            return server_error_response("Failed to update calendar event")

    @app.route("/api/calendar-events/<event_id>", methods=["DELETE"], endpoint="api_calendar_events_delete")
    @permission_required(CALENDAR_WRITE)
    def api_calendar_events_delete(event_id: str):
        try:
            service.delete_event(event_id)
            return jsonify({"id": event_id}), 200
        except DomainError as e:
            return domain_error_response(e)
        except StorageError:
            log.exception("calendar_event_delete_failed", event_id=event_id)
            return server_error_response("Failed to delete calendar event")
