"""Date helpers for the document header."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

EPOCH = date(1970, 1, 1)


def today() -> date:
    """Return the current UTC calendar day."""
    return datetime.now(timezone.utc).date()


def date_from_timestamp(timestamp: int) -> date:
    """Convert a Unix timestamp to its UTC calendar day.

    Examples:
        date_from_timestamp(0)  # date(1970, 1, 1)
        date_from_timestamp(86399)  # date(1970, 1, 1)
    """
    return EPOCH + timedelta(days=timestamp // 86400)


def format_date(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"
