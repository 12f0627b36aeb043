"""
UTC clock helpers.

SQLite hands back naive datetimes while PostgreSQL returns aware ones, so
every timestamp crossing the storage boundary goes through ``as_utc``.
"""

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Authoritative server time for trip start/stop."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
