from __future__ import annotations

from typing import Any

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required", context={"field": field_name})
    return str(value).strip()


def require_positive_int(value: Any, field_name: str) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer", context={"field": field_name, "value": value})
    if parsed <= 0:
        raise ValidationError(f"{field_name} must be positive", context={"field": field_name, "value": value})
    return parsed


def require_non_negative_number(value: Any, field_name: str) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number", context={"field": field_name})
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number", context={"field": field_name, "value": value})
    if parsed != parsed or parsed < 0:
        raise ValidationError(f"{field_name} must be >= 0", context={"field": field_name, "value": value})
    return parsed


def require_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be true or false", context={"field": field_name})
    return value
