"""
revision_diff/dates.py

Lenient timestamp parsing shared by the formatter and the aggregator.

All parsers return ``None`` instead of raising.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timezone

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_iso_datetime(value: str) -> datetime | None:
    """
    Parse an ISO-8601 string; a trailing ``Z`` is read as UTC.
    """
    text = value.strip()
    if not text:
        return None
    normalized = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        return datetime.fromisoformat(normalized)
    except ValueError:
        return None


def from_epoch_millis(value: int | float) -> datetime | None:
    """Epoch milliseconds to an aware UTC datetime."""
    try:
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def parse_timestamp(value: object) -> datetime | None:
    """
    Best-effort conversion of a JSON timestamp field to ``datetime``.

    Accepts datetimes, dates, ``YYYY-MM-DD``, ISO strings with time and
    epoch milliseconds. Naive results stay naive.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return from_epoch_millis(value)
    if isinstance(value, str):
        text = value.strip()
        if _DATE_ONLY.match(text):
            try:
                return datetime.combine(date.fromisoformat(text), time())
            except ValueError:
                return None
        return parse_iso_datetime(text)
    return None


def parse_calendar_date(value: object) -> date | None:
    """
    Calendar date for date-valued revision fields.

    Strings must be ``YYYY-MM-DD`` or ISO with a ``T`` time part; anything
    else is left for generic rendering.
    """
    if isinstance(value, str):
        text = value.strip()
        if not (_DATE_ONLY.match(text) or "T" in text):
            return None
        value = text
    parsed = parse_timestamp(value)
    return parsed.date() if parsed is not None else None
