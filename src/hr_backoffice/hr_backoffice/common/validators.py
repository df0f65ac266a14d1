from __future__ import annotations

from typing import Any, Mapping, Sequence

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str, *, code: str = "MISSING_PARAMETER") -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"Missing {field_name} parameter", code)
    return str(value).strip()


def require_fields(payload: Mapping[str, Any], fields: Sequence[str]) -> None:
    missing = [f for f in fields if payload.get(f) in (None, "")]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(fields)}", "MISSING_PARAMETERS")


def as_bool(value: Any, field_name: str) -> bool:
    """Spreadsheet-style booleans: True/False, 'TRUE'/'false', 1/0."""
    if isinstance(value, bool):
        return value
    if value in (None, ""):
        return False
    if isinstance(value, (int, float)):
        return bool(value)
    text = str(value).strip().lower()
    if text in {"true", "1", "yes"}:
        return True
    if text in {"false", "0", "no"}:
        return False
    raise ValidationError(f"{field_name} must be a boolean")


def as_non_negative_number(value: Any, field_name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if number < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return number
