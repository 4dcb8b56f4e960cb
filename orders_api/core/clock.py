"""
UTC time helpers

Timestamps are stored and compared in UTC. Some backends (SQLite) hand
back naive datetimes, which are interpreted as UTC.
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
