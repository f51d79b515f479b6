"""Shared request validation helpers."""

import re
from dataclasses import dataclass
from datetime import date

from ayur_diet_tracker.errors import ValidationError

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DEFAULT_MAX_LIMIT = 100


@dataclass(frozen=True)
class Page:
    """Limit/offset pagination window."""

    limit: int
    offset: int

    @classmethod
    def build(
        cls, limit: int | None, offset: int | None, default: int, maximum: int
    ) -> "Page":
        """Clamp raw query values into a usable window."""
        resolved_limit = default if limit is None or limit <= 0 else limit
        return cls(
            limit=min(resolved_limit, maximum),
            offset=max(offset or 0, 0),
        )


def is_date_format(value: str) -> bool:
    """Return True when the value looks like YYYY-MM-DD."""
    return bool(DATE_PATTERN.match(value))


def is_calendar_date(value: str) -> bool:
    """Return True when the value is YYYY-MM-DD and a real calendar date."""
    if not is_date_format(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def is_email(value: str) -> bool:
    """Return True when the value looks like an email address."""
    return bool(EMAIL_PATTERN.match(value))


def require_date_range(
    start_date: str | None,
    end_date: str | None,
    *,
    start_code: str = "INVALID_DATE_FORMAT",
    end_code: str = "INVALID_DATE_FORMAT",
    strict: bool = False,
) -> None:
    """Validate optional start/end date filters."""
    check = is_calendar_date if strict else is_date_format
    if start_date and not check(start_date):
        raise ValidationError("Invalid start_date format. Use YYYY-MM-DD", start_code)
    if end_date and not check(end_date):
        raise ValidationError("Invalid end_date format. Use YYYY-MM-DD", end_code)


def is_positive_int(value: object) -> bool:
    """Return True for ints (not bools) greater than zero."""
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def is_number(value: object) -> bool:
    """Return True for ints or floats, excluding bools."""
    return isinstance(value, int | float) and not isinstance(value, bool)


def strip_or_none(value: object) -> str | None:
    """Trim a string value, mapping empty or missing values to None."""
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None
