"""Request helpers shared by the JSON controllers."""

from __future__ import annotations

import logging
from datetime import date
from functools import wraps
from typing import Optional

from flask import jsonify, request, session

from ..core.context import TenantContext
from ..core.enums import Role
from ..core.exceptions import DataAccessError, NotFoundError, ValidationError
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)


def current_context() -> TenantContext:
    employee_id = session.get("employee_id")
    return TenantContext(
        customer_id=int(session["customer_id"]),
        employee_id=int(employee_id) if employee_id is not None else None,
    )


def is_admin() -> bool:
    return session.get("role") == Role.ADMIN.value


def fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def tenant_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if session.get("customer_id") is None:
            return fail("Please sign in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if session.get("customer_id") is None:
            return fail("Please sign in to continue", 401)
        if not is_admin():
            return fail("You do not have permission for this action", 403)
        return view(*args, **kwargs)

    return wrapper


def json_errors(view):
    """Map domain errors raised by a view onto JSON responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ValidationError as e:
            logger.warning("%s rejected: %s", request.path, e)
            return fail(str(e), 400)
        except NotFoundError as e:
            logger.warning("%s not found: %s", request.path, e)
            return fail(str(e), 404)
        except DataAccessError:
            logger.exception("%s failed to reach the database", request.path)
            return fail("The service is temporarily unavailable", 503)

    return wrapper


def json_body() -> dict:
    return request.get_json(silent=True) or {}


def date_arg(name: str, default: Optional[date] = None) -> Optional[date]:
    raw = (request.args.get(name) or "").strip()
    if not raw:
        return default
    try:
        return parse_iso_date(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a date in YYYY-MM-DD format")


def date_field(data: dict, name: str, *, required: bool = True) -> Optional[date]:
    raw = str(data.get(name) or "").strip()
    if not raw:
        if required:
            raise ValidationError(f"{name} is required")
        return None
    try:
        return parse_iso_date(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a date in YYYY-MM-DD format")


def int_arg(name: str) -> Optional[int]:
    raw = (request.args.get(name) or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a number")
