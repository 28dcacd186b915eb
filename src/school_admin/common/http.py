from __future__ import annotations

from flask import jsonify, request

from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)


def json_body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def domain_error_response(e: DomainError):
    """Map a domain exception to (json, status) for the API views."""

    if isinstance(e, ValidationError):
        return jsonify(e.to_dict()), 400
    if isinstance(e, NotFoundError):
        return jsonify({"error": str(e)}), 404
    if isinstance(e, AuthorizationError):
        return jsonify({"error": str(e)}), 403
    if isinstance(e, ConflictError):
        return jsonify({"error": str(e), "conflicting": e.conflicting}), 409
    return jsonify({"error": str(e)}), 400


def server_error_response(message: str):
    return jsonify({"error": message}), 500
