"""Shared Flask helpers: JSON envelopes, error mapping, session auth."""

from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from functools import wraps
from typing import Any

from flask import Flask, g, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..access.actors import actor_from_user
from ..access.model import Actor
from ..common.datetime_utils import parse_iso_date, parse_iso_datetime
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def to_jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def ok(data: Any = None, status: int = 200):
    return jsonify({"success": True, "data": to_jsonable(data)}), status


def error_response(code: str, message: str, status: int):
    return jsonify({"success": False, "error": {"code": code, "message": message, "path": request.path}}), status


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation(e):
        return error_response("VALIDATION_ERROR", str(e), 400)

    @app.errorhandler(AuthenticationError)
    def _authentication(e):
        return error_response("AUTHENTICATION_REQUIRED", str(e), 401)

    @app.errorhandler(AuthorizationError)
    def _authorization(e):
        return error_response("INSUFFICIENT_PERMISSIONS", str(e), 403)

    @app.errorhandler(NotFoundError)
    def _not_found(e):
        return error_response("NOT_FOUND", str(e), 404)

    @app.errorhandler(ConfigurationError)
    def _configuration(e):
        logger.exception("configuration error on %s", request.path)
        return error_response("INTERNAL_ERROR", "Internal server error", 500)

    @app.errorhandler(HTTPException)
    def _http(e):
        return error_response(e.name.upper().replace(" ", "_"), e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def _unexpected(e):
        logger.exception("unhandled error on %s %s", request.method, request.path)
        return error_response("INTERNAL_ERROR", "Internal server error", 500)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            raise AuthenticationError("Authentication is required to access this resource")
        return view(*args, **kwargs)

    return wrapper


def current_actor(users_repo) -> Actor:
    """Actor for the logged-in user, rebuilt from stored state once per request."""
    actor = g.get("actor")
    if actor is not None:
        return actor

    user = users_repo.get_by_id(int(session["user_id"]))
    if not user or not user.is_active:
        session.clear()
        raise AuthenticationError("Session is no longer valid, please log in again")

    g.actor = actor_from_user(user)
    return g.actor


def int_or_none(value: Any) -> Any:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid id: {value!r}")


def date_or_none(value: Any, field_name: str = "Date") -> Any:
    if value in (None, ""):
        return None
    try:
        return parse_iso_date(str(value))
    except ValueError:
        raise ValidationError(f"{field_name} must be YYYY-MM-DD")


def require_date(value: Any, field_name: str = "Date") -> Any:
    parsed = date_or_none(value, field_name)
    if parsed is None:
        raise ValidationError(f"{field_name} is required")
    return parsed


def datetime_or_none(value: Any, field_name: str = "Time") -> Any:
    if value in (None, ""):
        return None
    try:
        return parse_iso_datetime(str(value))
    except ValueError:
        raise ValidationError(f"{field_name} must be an ISO datetime")


def require_datetime(value: Any, field_name: str = "Time") -> Any:
    parsed = datetime_or_none(value, field_name)
    if parsed is None:
        raise ValidationError(f"{field_name} is required")
    return parsed
