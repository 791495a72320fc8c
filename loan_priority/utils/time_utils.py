"""
Date utilities for deadline-driven priority factors.

Key concepts:
  - Calendar-day granularity: deadlines are compared as dates, never as
    timestamps, so an item does not flap between tiers during a single day.
  - Lenient parsing: ``parse_deadline`` returns ``None`` for anything it
    cannot read. Callers treat ``None`` as "no deadline", never as an error.
  - "Today" is UTC. Factors take an injectable clock so tests can pin it.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Callable, Optional

DateLike = date | datetime | str | None

Clock = Callable[[], date]


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)


def utc_today() -> date:
    """Return the current UTC calendar date. Default clock for deadline factors."""
    return utcnow().date()


def fixed_clock(today: date) -> Clock:
    """Return a clock that always reports ``today``.

    Used by the CLI ``--as-of`` option and by tests.
    """
    def _clock() -> date:
        return today

    return _clock


def parse_deadline(value: DateLike) -> Optional[date]:
    """Coerce a deadline field to a calendar date, or ``None``.

    Accepts ``date``, ``datetime`` (timezone-aware values are converted to
    UTC first), and ISO-8601 strings (``"2026-03-01"``,
    ``"2026-03-01T17:00:00Z"``). Returns ``None`` for ``None``, empty
    strings, and strings that are not valid ISO dates.

    Args:
        value: Raw deadline value from a domain item.

    Returns:
        Calendar date of the deadline, or ``None``.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _datetime_to_date(value)
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    try:
        return _datetime_to_date(datetime.fromisoformat(text))
    except ValueError:
        return None


def days_until(deadline: date, today: date) -> int:
    """Return signed number of calendar days from ``today`` to ``deadline``.

    Positive: deadline is in the future.
    Zero: deadline is today.
    Negative: deadline has passed.
    """
    return (deadline - today).days


def _datetime_to_date(value: datetime) -> date:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.date()
