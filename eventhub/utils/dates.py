"""Date parsing helpers."""

from datetime import date, datetime
from typing import Optional, Union

def parse_datetime(value: str) -> datetime:
    """Parse an ISO 8601 timestamp as sent by the API (a trailing 'Z' is accepted)."""
    return datetime.fromisoformat(value.strip().replace('Z', '+00:00'))

def parse_date(value: Union[str, date, None]) -> Optional[date]:
    """
    Parse a calendar date, dropping any time of day.

    Accepts `date`/`datetime` objects, plain `YYYY-MM-DD` strings and full ISO
    timestamps. Blank values give None.

    Raises:
        ValueError: If the value is not a recognisable date
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Unsupported date value: {value!r}")
    value = value.strip()
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return parse_datetime(value).date()
