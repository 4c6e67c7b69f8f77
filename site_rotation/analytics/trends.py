"""
Placement trend series for charts.

``trend()`` partitions ``[window_start, window_end]`` into day or week
buckets and counts placements per bucket.  The series is **dense**: every
bucket from the one containing ``window_start`` through the one containing
``window_end`` is emitted in chronological order, including zero-count
buckets, so charts and tests can rely on a contiguous sequence.

Day buckets are local calendar days.  Week buckets start on
``week_start`` (0 = Monday, the ISO convention).  Each bucket is
identified by the local date it starts on.

A 7-day window grouped by day always yields exactly 7 points.
"""

from __future__ import annotations

from collections import Counter
from datetime import date, datetime, tzinfo
from enum import StrEnum
from typing import Iterable, Optional, Sequence

from site_rotation.models.analytics import TrendPoint
from site_rotation.models.placement import PlacementEvent
from site_rotation.models.site import Site
from site_rotation.sites.catalog import active_sites
from site_rotation.utils.time_utils import date_range, in_window, local_date, start_of_week


class TrendGrouping(StrEnum):
    """Bucket granularity for trend series."""

    DAY = "day"
    WEEK = "week"


def bucket_for(
    day: date,
    group_by: TrendGrouping,
    week_start: int = 0,
) -> date:
    """Return the start date of the bucket containing ``day``."""
    if group_by == TrendGrouping.WEEK:
        return start_of_week(day, week_start)
    return day


def trend(
    events: Iterable[PlacementEvent],
    group_by: TrendGrouping | str,
    window_start: datetime,
    window_end: datetime,
    site: Optional[Site] = None,
    tz: Optional[tzinfo] = None,
    week_start: int = 0,
) -> list[TrendPoint]:
    """Build a dense placement-count series.

    Args:
        events: Placement history snapshot.
        group_by: ``"day"`` or ``"week"``.
        window_start: Inclusive start of the window.
        window_end: Inclusive end of the window.
        site: When given, only placements at this site are counted.
        tz: Local time zone for calendar-day boundaries.
        week_start: First weekday of a week bucket (0 = Monday).

    Returns:
        One ``TrendPoint`` per bucket, chronological, zero buckets included.

    Raises:
        ValueError: If ``window_end < window_start``, ``group_by`` is not a
            known grouping, or ``week_start`` is outside 0–6.
    """
    grouping = TrendGrouping(group_by)
    if window_end < window_start:
        raise ValueError(f"window_end ({window_end}) must be >= window_start ({window_start}).")

    first = bucket_for(local_date(window_start, tz), grouping, week_start)
    last = bucket_for(local_date(window_end, tz), grouping, week_start)
    step = 7 if grouping == TrendGrouping.WEEK else 1

    counts: Counter[date] = Counter()
    for event in events:
        if site is not None and event.site_ref != site.ref:
            continue
        if not in_window(event.placed_at, window_start, window_end):
            continue
        counts[bucket_for(local_date(event.placed_at, tz), grouping, week_start)] += 1

    return [
        TrendPoint(bucket_start=bucket, count=counts.get(bucket, 0), site=site)
        for bucket in date_range(first, last, step_days=step)
    ]


def site_trends(
    catalog: Sequence[Site],
    events: Iterable[PlacementEvent],
    group_by: TrendGrouping | str,
    window_start: datetime,
    window_end: datetime,
    tz: Optional[tzinfo] = None,
    week_start: int = 0,
) -> dict[str, list[TrendPoint]]:
    """Return one dense series per active site, keyed by site id.

    All series share the same buckets, so they can be stacked directly.

    Raises:
        InvalidConfigurationError: If the active catalog is empty.
    """
    history = list(events)
    return {
        s.id: trend(history, group_by, window_start, window_end, site=s, tz=tz, week_start=week_start)
        for s in active_sites(catalog)
    }
