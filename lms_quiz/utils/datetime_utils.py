"""
Datetime helpers.

All timestamps are handled as timezone-aware UTC. Some backends (SQLite)
hand back naive datetimes for ``DateTime(timezone=True)`` columns; those are
taken to be UTC.
"""

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes, convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
