"""
app/validators/timestamps.py

Lenient timestamp parsing for tabular and payload inputs.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

TIMESTAMP_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
)


def ensure_utc(value: datetime) -> datetime:
    """
    Treat naive datetimes as UTC; convert aware ones to UTC.
    """

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """
    Parse ISO-8601 or one of ``TIMESTAMP_FORMATS`` into an aware UTC datetime.

    Raises ValueError on blank or unrecognized input.
    """

    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if value is None or str(value).strip() == "":
        raise ValueError("Required value is missing.")

    raw = str(value).strip()
    normalized = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
    try:
        return ensure_utc(datetime.fromisoformat(normalized))
    except ValueError:
        pass

    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(raw, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue

    raise ValueError("Invalid date/time format.")
