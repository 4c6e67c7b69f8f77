"""
Logging streaks: consecutive calendar days with at least one placement.

Streaks reward logging regardless of *which* site was used; they are
orthogonal to rotation quality.

A current streak stays alive through "yesterday": a user who logged
yesterday but not yet today still has their streak.  Once a full calendar
day passes with no placement, the current streak is 0.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable, Optional

from site_rotation.models.placement import PlacementEvent
from site_rotation.utils.time_utils import local_date


def logged_days(
    events: Iterable[PlacementEvent],
    tz: Optional[tzinfo] = None,
) -> set[date]:
    """Return the distinct local calendar days with at least one placement."""
    return {local_date(e.placed_at, tz) for e in events}


def current_streak(
    events: Iterable[PlacementEvent],
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> int:
    """Return the current consecutive-day logging streak.

    Args:
        events: Placement history (any order).
        now: Evaluation instant.
        tz: Local time zone for calendar-day boundaries.

    Returns:
        0 with no events or when the most recent logged day is before
        yesterday; otherwise the number of consecutive logged days ending
        on the most recent logged day.
    """
    days = logged_days(events, tz)
    if not days:
        return 0

    today = local_date(now, tz)
    # Only days up to today count; a future-dated entry cannot extend a streak.
    past_days = {d for d in days if d <= today}
    if not past_days:
        return 0

    most_recent = max(past_days)
    if most_recent < today - timedelta(days=1):
        return 0

    streak = 0
    check = most_recent
    while check in past_days:
        streak += 1
        check -= timedelta(days=1)
    return streak


def longest_streak(
    events: Iterable[PlacementEvent],
    tz: Optional[tzinfo] = None,
) -> int:
    """Return the longest run of consecutive logged days ever recorded."""
    days = sorted(logged_days(events, tz))
    if not days:
        return 0

    best = run = 1
    for prev, curr in zip(days, days[1:]):
        if curr - prev == timedelta(days=1):
            run += 1
            best = max(best, run)
        else:
            run = 1
    return best
