"""Timestamp helpers: one place for "now" and for lenient ISO-8601 parsing."""

from datetime import date, datetime, timezone
from typing import Any, Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current instant, timezone-aware UTC."""
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """
    Format an instant the way ledger entries are stored.

    UTC, millisecond precision, ``Z`` suffix, e.g. ``2024-01-01T08:30:00.000Z``.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse a stored timestamp or date into an aware UTC datetime.

    Accepts datetimes, dates, ISO-8601 strings (with or without ``Z``) and
    bare ``YYYY-MM-DD`` dates, which are read as UTC midnight. Returns None
    for empty or unparsable input.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
