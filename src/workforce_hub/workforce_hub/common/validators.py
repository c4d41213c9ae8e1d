from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: str, field_name: str) -> str:
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text")
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def optional_text(value, field_name: str = "Value") -> Optional[str]:
    """Stripped text, or None when blank."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text")
    return value.strip() or None


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if not isinstance(value, str) or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_email(value: str, field_name: str = "Email") -> str:
    value = require_non_empty(value, field_name).lower()
    local, _, domain = value.partition("@")
    if not local or "." not in domain:
        raise ValidationError(f"{field_name} is not a valid email address")
    return value


def require_enum(enum_cls: Type[E], value, field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value or "").strip().upper())
    except ValueError:
        raise ValidationError(f"{field_name} is not valid")


def require_positive_amount(value, field_name: str = "Amount") -> Decimal:
    try:
        amount = Decimal(str(value))
        if not amount.is_finite():
            raise InvalidOperation
        amount = amount.quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} is not a valid number")
    if amount <= 0:
        raise ValidationError(f"{field_name} must be greater than 0")
    return amount


def require_date_range(start: date, end: Optional[date]) -> None:
    if end is not None and end < start:
        raise ValidationError("End date must be on or after start date")
