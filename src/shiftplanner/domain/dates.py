"""Calendar helpers for expanding date ranges and months."""

import calendar
import re
from datetime import date, timedelta
from typing import Any

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_iso_date(value: Any) -> date:
    """Parse a strict ``YYYY-MM-DD`` string (dates pass through).

    Raises:
        ValueError: If the value is not a well-formed calendar date.
    """
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not _ISO_DATE.match(text):
        raise ValueError(f"Not a YYYY-MM-DD date: {value!r}")
    return date.fromisoformat(text)


def is_iso_date(value: Any) -> bool:
    """Check if a value is a well-formed ``YYYY-MM-DD`` calendar date."""
    try:
        parse_iso_date(value)
    except ValueError:
        return False
    return True


def expand_date_range(start_date: date, end_date: date) -> list[date]:
    """All dates from start to end, inclusive and ascending.

    Returns an empty list when ``end_date`` is before ``start_date``.
    """
    days = (end_date - start_date).days
    return [start_date + timedelta(days=i) for i in range(days + 1)]


def month_range(year: int, month: int) -> tuple[date, date]:
    """First and last date of a calendar month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def expand_month(year: int, month: int) -> list[date]:
    """All dates of a calendar month, ascending."""
    return expand_date_range(*month_range(year, month))


def span_days(start_date: date, end_date: date) -> int:
    """Number of days between two dates (end minus start)."""
    return (end_date - start_date).days
