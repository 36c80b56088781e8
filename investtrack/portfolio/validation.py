"""Boundary validation shared by the stock and asset ledgers."""

import math
from typing import Any

from ..exceptions import ValidationError


def require_number(field: str, value: Any) -> float:
    """
    Ensure ``value`` is a finite real number.

    Booleans are rejected even though they are ints in Python.

    Raises:
        ValidationError: If the value is not a finite number
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(
            f"{field} must be a number",
            field=field,
            value=value,
            expected="finite number"
        )
    if not math.isfinite(value):
        raise ValidationError(
            f"{field} must be finite",
            field=field,
            value=value,
            expected="finite number"
        )
    return value


def require_positive(field: str, value: Any) -> float:
    """
    Ensure ``value`` is a finite number greater than zero.

    Raises:
        ValidationError: If the value is not a positive finite number
    """
    value = require_number(field, value)
    if value <= 0:
        raise ValidationError(
            f"{field} must be greater than 0",
            field=field,
            value=value,
            expected="> 0"
        )
    return value


def require_text(field: str, value: Any) -> str:
    """Ensure ``value`` is a non-blank string and return it stripped."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(
            f"{field} must be a non-empty string",
            field=field,
            value=value
        )
    return value.strip()
