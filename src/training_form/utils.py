"""
Utility functions for the Training Form package.

This module contains helper functions used across multiple modules.
"""

import math
from datetime import date, datetime, timedelta

from .constants import TimeConstants
from .exceptions import ValidationError


def round1(value: float) -> float:
    """Round a value to one decimal place."""
    return round(float(value), 1)


def parse_date(value: str | date | datetime | None, parameter: str = "date") -> date | None:
    """
    Parse a ``YYYY-MM-DD`` string into a date.

    Args:
        value: String, date or datetime to normalize. ``None`` passes through.
        parameter: Name reported in the validation error.

    Returns:
        The parsed date, or None when ``value`` is None.

    Raises:
        ValidationError: If the string is not a valid calendar date.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value, TimeConstants.DATE_FORMAT).date()
    except (TypeError, ValueError) as e:
        raise ValidationError(parameter, f"'{value}' is not a valid date", "YYYY-MM-DD") from e


def add_days(day: date, days: int) -> date:
    """Return ``day`` shifted by a whole number of days."""
    return day + timedelta(days=days)


def days_between(start: date, end: date) -> int:
    """Whole days from ``start`` to ``end`` (negative if ``end`` is earlier)."""
    return (end - start).days


def format_date(day: date) -> str:
    """Format a date as ``YYYY-MM-DD``."""
    return day.strftime(TimeConstants.DATE_FORMAT)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up."""
    return int(math.floor(value + 0.5))
