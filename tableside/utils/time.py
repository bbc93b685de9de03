"""UTC time helpers shared by pricing windows and the order board."""

from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware datetime.

    SQLite hands back naive datetimes even for ``DateTime(timezone=True)``
    columns; every timestamp is stored in UTC, so naive values are read as UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
