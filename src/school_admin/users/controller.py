from __future__ import annotations

from flask import Flask, jsonify, request

from ..access.guard import make_permission_required
from ..access.policy import USERS_IMPORT
from ..common.http import domain_error_response, json_body, server_error_response
from ..common.logging import get_logger
from ..container import Container
from ..core.exceptions import DomainError, StorageError, ValidationError

log = get_logger(__name__)


def register(app: Flask, container: Container) -> None:
    permission_required = make_permission_required(container.permissions)
    service = container.user_service

    @app.route("/api/users/<user_type>", methods=["POST"], endpoint="api_users_create")
    @permission_required(USERS_IMPORT)
    def api_users_create(user_type: str):
        try:
            user_id = service.create_user(user_type, json_body())
            return jsonify({"id": user_id}), 201
        except DomainError as e:
            return domain_error_response(e)
        except StorageError:
            log.exception("user_create_failed", user_type=user_type)
            return server_error_response("Failed to create user")

    @app.route("/api/users/<user_type>/import", methods=["POST"], endpoint="api_users_import")
    @permission_required(USERS_IMPORT)
    def api_users_import(user_type: str):
        try:
            upload = request.files.get("file")
            if upload is None or not upload.filename:
                raise ValidationError("An .xlsx file is required", field="file")
            result = service.import_users(upload.stream, user_type)
            status = 201 if result.created_ids else 400
            return jsonify(result.to_dict()), status
        except DomainError as e:
            return domain_error_response(e)
        except StorageError:
            log.exception("user_import_failed", user_type=user_type)
            return server_error_response("Failed to import users")
