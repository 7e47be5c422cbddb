from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_decimal(value: Any, field_name: str, *, minimum: Decimal = Decimal("0"), strict: bool = False) -> Decimal:
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be numeric") from None

    if not number.is_finite():
        raise ValidationError(f"{field_name} must be numeric")
    if strict and number <= minimum:
        raise ValidationError(f"{field_name} must be greater than {minimum}")
    if number < minimum:
        raise ValidationError(f"{field_name} cannot be negative")
    return number


def require_positive_int(value: Any, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a whole number") from None

    if number < 1:
        raise ValidationError(f"{field_name} must be at least 1")
    return number


def parse_bool(value: Any) -> bool:
    """Form and JSON flags: "1"/"true"/"yes" are true, other strings false."""

    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)
