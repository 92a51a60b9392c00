"""
ISO-8601 parsing helpers shared by the request schemas and the services.

Request bodies carry dates as strings ("2024-01-31" or full timestamps).
A date-only upper bound covers the whole day.
"""
from datetime import date, datetime, time, timezone
from typing import Tuple


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_date_only(value: str) -> bool:
    return len(value.strip()) == 10


def _fromiso(value: str) -> datetime:
    return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO string into an aware UTC datetime. Raises ValueError."""
    parsed = _fromiso(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def as_date(value: str) -> date:
    """Calendar date as written by the caller, offset left as given"""
    return _fromiso(value).date()


def period_bounds(start: str, end: str) -> Tuple[datetime, datetime]:
    """Inclusive [start, end] datetimes for a reading/transaction window."""
    lower = parse_timestamp(start)
    upper = parse_timestamp(end)
    if is_date_only(end):
        upper = datetime.combine(upper.date(), time.max, tzinfo=timezone.utc)
    return lower, upper


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def day_key(value: str) -> str:
    """YYYY-MM-DD of a stored timestamp string"""
    return parse_timestamp(value).date().isoformat()


__all__ = [
    "utcnow",
    "is_date_only",
    "parse_timestamp",
    "as_date",
    "period_bounds",
    "to_naive_utc",
    "day_key",
]
