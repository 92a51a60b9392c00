"""
Helpers shared by the request schemas
"""
from typing import Any, Optional

from utility_billing.core.dates import as_date, parse_timestamp


def iso_string(value: Any) -> str:
    """Accept an ISO-8601 date or timestamp, return it stripped"""
    if not isinstance(value, str) or not value.strip():
        raise ValueError("must be an ISO-8601 date or timestamp")
    try:
        parse_timestamp(value)
    except ValueError:
        raise ValueError(f"'{value}' is not an ISO-8601 date or timestamp")
    return value.strip()


def optional_iso_string(value: Any) -> Optional[str]:
    if value is None:
        return None
    return iso_string(value)


def ensure_ordered(start: str, end: str, label: str) -> None:
    if as_date(end) < as_date(start):
        raise ValueError(f"{label} end must not precede its start")
