"""Input shape checks run before any mutation is attempted.

Everything here is pure: no I/O, no store access. Existence and capacity
checks belong to the booking rules in ``domain.services``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from numbers import Real
from typing import Any, Mapping

from ..utils.time import is_future, parse_instant

EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

# upper bound of the INTEGER columns holding minutes and seats
MAX_STORED_INT = 2**31 - 1


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: str | None = None


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def is_valid_email(email: Any) -> bool:
    if not email or not isinstance(email, str):
        return False
    return EMAIL_RE.fullmatch(email) is not None


def is_valid_service_name(name: Any) -> bool:
    return isinstance(name, str) and len(name.strip()) > 0


def _is_positive_whole(value: Any) -> bool:
    if not _is_number(value):
        return False
    # is_integer() is False for inf and nan
    if isinstance(value, float) and not value.is_integer():
        return False
    return 0 < value <= MAX_STORED_INT and value == int(value)


def is_valid_duration(duration: Any) -> bool:
    """Whole minutes, integral floats such as 45.0 included."""
    return _is_positive_whole(duration)


def is_valid_capacity(capacity: Any) -> bool:
    return _is_positive_whole(capacity)


def is_valid_future_datetime(value: str | datetime | None) -> bool:
    instant = parse_instant(value)
    return instant is not None and is_future(instant)


def validate_email_with_message(email: Any) -> str | None:
    if not email:
        return "email is required"
    if not is_valid_email(email):
        return "invalid email format (example: alice@example.com)"
    return None


def _field(payload: Any, *names: str) -> Any:
    if isinstance(payload, Mapping):
        for name in names:
            if name in payload:
                return payload[name]
        return None
    for name in names:
        if hasattr(payload, name):
            return getattr(payload, name)
    return None


def validate_reservation(payload: Any) -> ValidationResult:
    """Structural gate for a booking request (mapping or object with user_email/slot_id)."""
    if payload is None:
        return ValidationResult(False, "reservation payload is required")
    user_email = _field(payload, "user_email", "userEmail")
    slot_id = _field(payload, "slot_id", "slotId")

    if not user_email:
        return ValidationResult(False, "user email is missing")
    if not is_valid_email(user_email):
        return ValidationResult(False, "invalid email")
    if not slot_id or not isinstance(slot_id, str):
        return ValidationResult(False, "slot id is missing")
    return ValidationResult(True)
