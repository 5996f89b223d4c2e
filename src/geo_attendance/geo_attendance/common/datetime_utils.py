from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_utc() -> datetime:
    """Current UTC time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Naive datetimes are treated as UTC (that is how they are stored)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_db_datetime(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    return ensure_utc(value).replace(tzinfo=None)


def from_db_datetime(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    return ensure_utc(value)


def hours_between(start: datetime, end: datetime) -> float:
    """Elapsed hours rounded to 2 decimals (may be negative)."""
    seconds = (ensure_utc(end) - ensure_utc(start)).total_seconds()
    return round(seconds / 3600.0, 2)
