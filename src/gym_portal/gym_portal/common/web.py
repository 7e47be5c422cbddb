from __future__ import annotations

import logging
from functools import wraps
from typing import Callable, Optional

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    DuplicateOpenSession,
    InvalidTransition,
    PaymentDeclined,
    ValidationError,
)
from .pagination import Page

logger = logging.getLogger(__name__)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "error": "unauthenticated", "message": "Please log in to continue"}), 401
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "error": "unauthenticated", "message": "Please log in to continue"}), 401
            if session.get("role") not in allowed:
                return jsonify({"success": False, "error": "forbidden", "message": "You do not have access"}), 403
            return view(*args, **kwargs)

        return wrapper

    return decorator


def current_user_id() -> int:
    return int(session["user_id"])


def status_code_for(exc: DomainError) -> int:
    if isinstance(exc, InvalidTransition):
        return 404 if exc.reason == InvalidTransition.NOT_FOUND else 409
    if isinstance(exc, DuplicateOpenSession):
        return 409
    if isinstance(exc, AuthenticationError):
        return 401
    if isinstance(exc, AuthorizationError):
        return 403
    if isinstance(exc, PaymentDeclined):
        return 402
    if isinstance(exc, ValidationError):
        return 400
    return 400


def error_response(exc: DomainError):
    body = {"success": False, "error": exc.code, "message": str(exc)}
    if isinstance(exc, InvalidTransition):
        body["reason"] = exc.reason
        body["attendance_id"] = exc.attendance_id
    if isinstance(exc, DuplicateOpenSession):
        body["attendance_id"] = exc.attendance_id
    return jsonify(body), status_code_for(exc)


def server_error(message: str):
    logger.exception(message)
    return jsonify({"success": False, "error": "server_error", "message": message}), 500


def page_to_dict(page: Page, serialize: Callable) -> dict:
    return {
        "data": [serialize(item) for item in page.data],
        "current_page": page.current_page,
        "last_page": page.last_page,
        "total": page.total,
        "per_page": page.per_page,
    }


def query_int(name: str, default: int) -> int:
    try:
        return int(request.args.get(name, default))
    except (TypeError, ValueError):
        return default


def query_bool(name: str) -> Optional[bool]:
    raw = (request.args.get(name) or "").strip().lower()
    if raw in {"1", "true", "active"}:
        return True
    if raw in {"0", "false", "inactive"}:
        return False
    return None


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
