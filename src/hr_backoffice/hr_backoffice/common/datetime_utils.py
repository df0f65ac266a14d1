from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Iterator, Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def coerce_date(value, field_name: str) -> date:
    """Accept a date or a YYYY-MM-DD string (longer ISO timestamps are cut to the date)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return parse_iso_date(str(value).strip()[:10])
    except ValueError:
        raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)")


def optional_date(value, field_name: str) -> Optional[date]:
    if value in (None, ""):
        return None
    return coerce_date(value, field_name)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Every calendar day in [start, end]."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def now_utc() -> datetime:
    """Current time in UTC.

    Note: Wrapped so tests can patch it easily.
    """
    return datetime.now(timezone.utc)


def today() -> date:
    return date.today()


def isoformat(value: Optional[datetime | date]) -> Optional[str]:
    return value.isoformat() if value else None


def parse_timestamp(value) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp, including the `Z` suffix of JavaScript `toISOString()`."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)
