# src/remark_mongo/db/time.py
"""Time utilities for stored documents.

MongoDB keeps datetimes as UTC milliseconds and the driver hands them back
as naive values. Everything outside the repositories works with
timezone-aware UTC datetimes, so values cross the storage boundary through
:func:`to_storage` and :func:`from_storage`.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

# Go's zero ``time.Time``; Remark42 treats it as "no timestamp".
ZERO_TIME = datetime(1, 1, 1, tzinfo=UTC)


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def is_zero(value: datetime | None) -> bool:
    """Return True for missing timestamps and Go's zero time."""
    return value is None or as_utc(value) == ZERO_TIME


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive values are UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def to_storage(value: datetime | None) -> datetime | None:
    """Convert a datetime to the naive UTC form written to MongoDB."""
    if value is None:
        return None
    return as_utc(value).replace(tzinfo=None)


def from_storage(value: datetime | None) -> datetime | None:
    """Convert a datetime read from MongoDB to an aware UTC datetime."""
    if value is None:
        return None
    return as_utc(value)


def add_years(value: datetime, years: int) -> datetime:
    """Shift a datetime by whole calendar years (Feb 29 falls back to Feb 28)."""
    try:
        return value.replace(year=value.year + years)
    except ValueError:
        return value.replace(year=value.year + years, day=28)


def nanoseconds(value: int) -> timedelta:
    """Return a timedelta for a Go ``time.Duration`` nanosecond count."""
    return timedelta(microseconds=value / 1_000)
