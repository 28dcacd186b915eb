from __future__ import annotations

from functools import wraps

from flask import jsonify, session

from ..common.logging import get_logger
from .policy import PermissionResolver

log = get_logger(__name__)


def make_permission_required(resolver: PermissionResolver):
    """Build a decorator factory that checks the session role before the view runs.

    The external identity provider stores ``user_id`` and ``role`` in the session.
    """

    def permission_required(resource: str):
        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                if "user_id" not in session:
                    return jsonify({"error": "Authentication required"}), 401

                role = session.get("role")
                if not resolver.is_allowed(role, resource):
                    log.info("access_denied", user_id=session.get("user_id"), role=role, resource=resource)
                    return jsonify({"error": "Forbidden"}), 403

                return view(*args, **kwargs)

            return wrapper

        return decorator

    return permission_required
