"""
Calendar-day date utilities.

Pure Gregorian day counting: no working calendars, no holidays, no time of
day.  Every date that enters an engine passes through ``parse_date`` at the
service or DTO boundary, so engines only ever see ``datetime.date``.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date, datetime, timedelta

_DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M:%S",
    "%m/%d/%Y",
    "%m/%d/%y",
)


def parse_date(value: date | datetime | str | None) -> date | None:
    """
    Normalise a user or store supplied value to a ``date``.

    Accepts ``date``, ``datetime`` (time part dropped), ISO ``YYYY-MM-DD``
    strings (optionally with a time) and ``MM/DD/YYYY``.  ``None`` and empty
    strings pass through as ``None``.

    Raises:
        ValueError: if a string matches none of the accepted formats.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = value.strip()
    if not text:
        return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            pass
    # ISO strings with a "T" separator or offset
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise ValueError(f"Could not parse date: {value!r}") from None


def signed_days_between(start: date, end: date) -> int:
    """Whole days from ``start`` to ``end``; negative when ``end`` is earlier."""
    return (end - start).days


def days_between(start: date, end: date) -> int:
    """Whole days from ``start`` to ``end``, clamped at zero."""
    return max(0, signed_days_between(start, end))


def add_days(day: date, days: int) -> date:
    """Shift ``day`` by ``days`` calendar days (may be negative)."""
    return day + timedelta(days=days)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day from ``start`` to ``end`` inclusive."""
    current = start
    while current <= end:
        yield current
        current = add_days(current, 1)
