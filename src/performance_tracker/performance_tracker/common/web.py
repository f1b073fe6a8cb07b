"""Flask glue shared by the controllers: identity decorators and error responses."""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Mapping, Optional

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    ConflictError,
    DomainError,
    ForbiddenError,
    NotFoundError,
    PersistenceError,
    StateError,
    ValidationError,
)
from ..employees.model import Caller

LOGGER = logging.getLogger(__name__)

_STATUS = (
    (ValidationError, 400),
    (ForbiddenError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (StateError, 409),
)


def json_error(code: str, message: str, status: int, context: Optional[Mapping[str, Any]] = None):
    return jsonify({"success": False, "error": code, "message": message, "context": dict(context or {})}), status


def fail(e: Exception):
    """Map an exception raised by a service call to a JSON error response."""

    if isinstance(e, DomainError):
        status = next((s for cls, s in _STATUS if isinstance(e, cls)), 400)
        return json_error(e.code, e.message, status, e.context)
    if isinstance(e, PersistenceError):
        LOGGER.exception("storage unavailable during %s %s", request.method, request.path)
        return json_error("storage_unavailable", "Storage is temporarily unavailable", 503)

    LOGGER.exception("unhandled error during %s %s", request.method, request.path)
    return json_error("internal_error", "Internal server error", 500)


def current_caller() -> Optional[Caller]:
    if "user_id" not in session:
        return None

    roles = set()
    for raw in session.get("roles") or ():
        try:
            roles.add(Role(str(raw)))
        except ValueError:
            continue
    return Caller(user_id=int(session["user_id"]), roles=frozenset(roles))


def _require(role: Optional[Role]):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            caller = current_caller()
            if caller is None:
                return json_error("unauthorized", "Login required", 401)
            if role is not None and role not in caller.roles:
                return json_error("forbidden", f"{role.value.capitalize()} role required", 403)
            return view(caller, *args, **kwargs)

        return wrapper

    return decorator


login_required = _require(None)
employee_required = _require(Role.EMPLOYEE)
admin_required = _require(Role.ADMIN)


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data
