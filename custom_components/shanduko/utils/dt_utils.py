# File: utils/dt_utils.py
"""Date and time utilities for Shanduko.

Pure Python date/time functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

All timestamps are UTC ISO 8601 strings. The quiz "today" key is the UTC
calendar date, so two attempts on either side of local midnight can share a
key.

Functions:
    - dt_now_utc: Current datetime in UTC
    - dt_now_iso: Current datetime as ISO string
    - dt_today_iso: Today's UTC date as ISO string
    - dt_shift_hours: Shift a datetime by whole hours
    - dt_hours_ago_iso: Cutoff timestamp N hours before now
    - dt_days_ago_iso: Timestamp N days before a reference
    - dt_to_utc: Parse and convert to UTC
"""

from __future__ import annotations

from datetime import UTC, datetime
import logging

from dateutil.relativedelta import relativedelta

_LOGGER = logging.getLogger(__name__)


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


def dt_now_iso() -> str:
    """Return the current UTC datetime as an ISO 8601 string.

    Example:
        "2025-04-07T14:30:00.123456+00:00"
    """
    return dt_now_utc().isoformat()


def dt_today_iso() -> str:
    """Return today's UTC date as ISO string (YYYY-MM-DD)."""
    return dt_now_utc().date().isoformat()


def dt_shift_hours(dt_obj: datetime, hours: int) -> datetime:
    """Shift a datetime by a (possibly negative) number of hours."""
    return dt_obj + relativedelta(hours=hours)


def dt_hours_ago_iso(hours: int, now: datetime | None = None) -> str:
    """Return the ISO timestamp ``hours`` before ``now`` (default: current time).

    Used as the lower bound for reading-history windows.
    """
    reference = now or dt_now_utc()
    return dt_shift_hours(reference, -hours).isoformat()


def dt_days_ago_iso(days: int, now: datetime | None = None) -> str:
    """Return the ISO timestamp ``days`` before ``now``."""
    reference = now or dt_now_utc()
    return (reference - relativedelta(days=days)).isoformat()


def dt_to_utc(dt_str: str | None) -> datetime | None:
    """Parse a datetime string, assume UTC if naive, and convert to UTC.

    Args:
        dt_str: Datetime string to parse, or None

    Returns:
        UTC-aware datetime object, or None if parsing fails.
    """
    if not dt_str or not isinstance(dt_str, str):
        return None

    try:
        parsed = datetime.fromisoformat(dt_str)
    except ValueError:
        _LOGGER.debug("DEBUG: Unparseable datetime string: %s", dt_str)
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)
