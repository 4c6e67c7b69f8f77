"""
Calendar-day utilities for rotation analytics.

Key concepts:
  - Local calendar day: every rest-period, streak and trend computation works
    on midnight-to-midnight days in the user's local calendar, never on raw
    elapsed hours.  A placement at 23:30 and a check at 00:30 the next
    morning are one calendar day apart.
  - Time zone handling: callers pass an optional ``tzinfo``.  Aware
    datetimes are converted into it; naive datetimes are assumed to be
    local already.  With ``tz=None`` each datetime keeps its own offset.
  - Week alignment: week buckets start on a configurable weekday
    (0 = Monday, the ISO convention).
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Optional


def local_date(ts: datetime, tz: Optional[tzinfo] = None) -> date:
    """Return the local calendar date of ``ts``.

    Args:
        ts: Timestamp to convert.
        tz: Target time zone.  Ignored for naive ``ts``.

    Returns:
        The calendar date ``ts`` falls on in the local calendar.
    """
    if tz is not None and ts.tzinfo is not None:
        ts = ts.astimezone(tz)
    return ts.date()


def calendar_days_between(
    earlier: datetime,
    later: datetime,
    tz: Optional[tzinfo] = None,
) -> int:
    """Return the number of calendar-day boundaries between two timestamps.

    ``(local_date(later) - local_date(earlier)).days`` — negative when
    ``later`` is actually on an earlier day.
    """
    return (local_date(later, tz) - local_date(earlier, tz)).days


def start_of_week(day: date, week_start: int = 0) -> date:
    """Return the first day of the week containing ``day``.

    Args:
        day: Any calendar date.
        week_start: Weekday that starts a week (0 = Monday … 6 = Sunday).

    Raises:
        ValueError: If ``week_start`` is outside 0–6.
    """
    if not 0 <= week_start <= 6:
        raise ValueError(f"week_start must be in 0..6, got {week_start}.")
    offset = (day.weekday() - week_start) % 7
    return day - timedelta(days=offset)


def date_range(start: date, end: date, step_days: int = 1) -> list[date]:
    """Generate a list of dates from ``start`` to ``end`` (inclusive).

    Args:
        start: First date in the range.
        end: Last date in the range (inclusive).
        step_days: Step size in days (default 1).

    Returns:
        List of date objects.

    Raises:
        ValueError: If ``end < start`` or ``step_days < 1``.
    """
    if end < start:
        raise ValueError(f"end ({end}) must be >= start ({start}).")
    if step_days < 1:
        raise ValueError(f"step_days must be >= 1, got {step_days}.")

    result: list[date] = []
    current = start
    while current <= end:
        result.append(current)
        current += timedelta(days=step_days)
    return result


def to_zone_form(ts: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Bring ``ts`` into one consistent form for comparison.

    With ``tz``: naive values are read as wall time in ``tz`` and aware
    values are converted into it.  Without ``tz``: aware values become naive
    system-local time and naive values pass through.  Stored history written
    before and after a time zone was configured compares cleanly once every
    timestamp has gone through here.
    """
    if tz is not None:
        return ts.replace(tzinfo=tz) if ts.tzinfo is None else ts.astimezone(tz)
    return ts.astimezone().replace(tzinfo=None) if ts.tzinfo is not None else ts


def in_window(
    ts: datetime,
    window_start: Optional[datetime],
    window_end: Optional[datetime],
) -> bool:
    """Return ``True`` if ``ts`` lies in ``[window_start, window_end]``.

    Either bound may be ``None`` (open-ended).  Bounds are compared as
    instants, so a naive ``ts`` (system-local) may be checked against an
    aware window and vice versa.
    """
    instant = ts.timestamp()
    if window_start is not None and instant < window_start.timestamp():
        return False
    if window_end is not None and instant > window_end.timestamp():
        return False
    return True


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Only the CLI calls this; engine functions always receive ``now``.
    """
    return datetime.now(tz=timezone.utc)


def trailing_days_window(
    now: datetime,
    days: int,
    tz: Optional[tzinfo] = None,
) -> tuple[datetime, datetime]:
    """Return ``(start, now)`` covering the last ``days`` local calendar days.

    ``start`` is local midnight ``days - 1`` days before today, so a day-grouped
    trend over the window has exactly ``days`` buckets.

    Raises:
        ValueError: If ``days < 1``.
    """
    if days < 1:
        raise ValueError(f"days must be >= 1, got {days}.")
    local_now = now.astimezone(tz) if tz is not None and now.tzinfo is not None else now
    midnight = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight - timedelta(days=days - 1), now


def years_before(day: date, years: int) -> date:
    """Return the same calendar day ``years`` years earlier.

    February 29 maps to February 28 in a non-leap target year.
    """
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        return day.replace(year=day.year - years, day=28)
