"""Timestamp helpers.

Everything is stored as naive UTC. Aware datetimes coming in from the API are
converted at the boundary so comparisons against ``utcnow()`` stay valid.
"""

from datetime import datetime, time, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def start_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.min)
