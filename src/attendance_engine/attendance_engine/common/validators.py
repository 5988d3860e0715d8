from __future__ import annotations

from datetime import date, time
from typing import Any

from ..core.exceptions import ScheduleResolutionError, ValidationError
from .datetime_utils import parse_iso_date, parse_time_of_day


def require_non_empty(value: Any, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_date(value: Any, field_name: str) -> date:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field_name} is required")
    try:
        return parse_iso_date(value)
    except ValueError as exc:
        raise ValidationError(f"{field_name} must be YYYY-MM-DD, got {value!r}") from exc


def require_time(value: Any, field_name: str) -> time:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field_name} is required")
    try:
        return parse_time_of_day(value)
    except ScheduleResolutionError as exc:
        raise ValidationError(f"{field_name}: {exc}") from exc


def optional_time(value: Any, field_name: str) -> time | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return require_time(value, field_name)


def first_present(row: Any, *keys: str) -> Any:
    """Return the first non-empty value among `keys` (source files disagree on column names)."""
    for key in keys:
        value = row.get(key) if hasattr(row, "get") else None
        if value is not None and not (isinstance(value, str) and not value.strip()):
            return value
    return None
