from __future__ import annotations

import math
from datetime import date, datetime
from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_number(value, field_name: str) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field_name} is required")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not math.isfinite(number):
        raise ValidationError(f"{field_name} must be a number")
    return number


def require_percent(value, field_name: str = "percent") -> float:
    """Number in the closed range 0..100, rejected (not clamped) otherwise."""
    number = require_number(value, field_name)
    if number < 0 or number > 100:
        raise ValidationError(f"{field_name} must be between 0 and 100")
    return number


def require_positive(value, field_name: str) -> float:
    number = require_number(value, field_name)
    if number <= 0:
        raise ValidationError(f"{field_name} must be greater than 0")
    return number


def optional_coordinate(value, *, low: float, high: float) -> Optional[float]:
    """Parse an optional coordinate; blank or out-of-range values become None."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number < low or number > high:
        return None
    return number


def require_date(value, field_name: str) -> date:
    """Accept a `date` or a YYYY-MM-DD string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = require_non_empty(value, field_name)
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"{field_name} must be YYYY-MM-DD")
