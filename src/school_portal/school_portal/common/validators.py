from __future__ import annotations

import math
import re
from datetime import datetime, time
from typing import Optional

from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value.strip()) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value.strip()


def require_email(value: str) -> str:
    value = (value or "").strip().lower()
    if not _EMAIL_RE.match(value):
        raise ValidationError("Invalid email address")
    return value


def parse_hhmm(value: str, field_name: str) -> Optional[time]:
    v = (value or "").strip()
    if not v:
        return None
    try:
        return datetime.strptime(v, "%H:%M").time()
    except ValueError:
        raise ValidationError(f"{field_name} must be HH:MM")


def require_month(value: str) -> str:
    """Validate a YYYY-MM period string."""
    v = (value or "").strip()
    try:
        datetime.strptime(v, "%Y-%m")
    except ValueError:
        raise ValidationError("Month must be YYYY-MM")
    return v


def require_amount(value) -> float:
    """Money amount rounded to cents; must be a finite number above zero."""
    try:
        amount = round(float(value), 2)
    except (TypeError, ValueError):
        raise ValidationError("Amount must be a number")
    if not math.isfinite(amount) or amount <= 0:
        raise ValidationError("Amount must be greater than zero")
    return amount
