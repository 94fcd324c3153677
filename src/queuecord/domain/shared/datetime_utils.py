"""Date/time helpers.

- Always store and operate on timezone-aware UTC datetimes.
- Elapsed-time math is kept here as plain functions so data records
  carry no behavior of their own.
"""

from __future__ import annotations

from datetime import UTC, datetime

from queuecord.domain.shared.messages import ErrorMessages


def utcnow() -> datetime:
    """Preferred replacement for `datetime.now(UTC)`.

    Returns a timezone-aware datetime in UTC.
    """
    return datetime.now(UTC)


def seconds_since(started_at: datetime, now: datetime | None = None) -> int:
    """Whole seconds elapsed between *started_at* and *now* (never negative)."""
    if started_at.tzinfo is None:
        raise ValueError(ErrorMessages.TIMEZONE_REQUIRED)
    now = now or utcnow()
    if now.tzinfo is None:
        raise ValueError(ErrorMessages.TIMEZONE_REQUIRED)
    return max(0, int((now - started_at).total_seconds()))


def format_mm_ss(seconds: int) -> str:
    """Format a second count as ``mm:ss``; minutes are not wrapped into hours."""
    minutes, secs = divmod(max(0, seconds), 60)
    return f"{minutes:02d}:{secs:02d}"
