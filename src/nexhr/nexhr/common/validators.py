from __future__ import annotations

from typing import Optional

from ..core.exceptions import ValidationError

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def require_non_empty(value, field_name: str) -> str:
    if value is None or isinstance(value, (dict, list)):
        raise ValidationError(f"{field_name} is required")
    text = str(value).strip()
    if not text:
        raise ValidationError(f"{field_name} is required")
    return text


def require_non_negative(value, field_name: str) -> float:
    try:
        number = float(value or 0)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if number < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return number


def optional_int(value, field_name: str) -> Optional[int]:
    """Empty values mean "not set"; anything else must be a whole number."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a whole number")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a whole number")


def require_int_in_range(value, field_name: str, low: int, high: int) -> int:
    number = optional_int(value, field_name)
    if number is None:
        raise ValidationError(f"{field_name} is required")
    if not low <= number <= high:
        raise ValidationError(f"{field_name} must be between {low} and {high}")
    return number


def require_bool(value, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValidationError(f"{field_name} must be true or false")


def require_month(month) -> int:
    return require_int_in_range(month, "Month", 1, 12)


def optional_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise ValidationError("Expected a text value")
    return str(value).strip()


def require_choice(enum_cls, value, field_name: str):
    """Match ``value`` against an enum's labels or names, ignoring case."""
    if isinstance(value, enum_cls):
        return value
    text = optional_text(value).lower()
    for member in enum_cls:
        if text in (member.value.lower(), member.name.lower()):
            return member
    raise ValidationError(f"Unknown {field_name}: {value}")
