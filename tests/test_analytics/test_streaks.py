"""
Tests for site_rotation/analytics/streaks.py.

What we test
------------
current_streak():
  - 0 with no events.
  - Counts consecutive logged days ending today or yesterday.
  - Several placements on one day count once.
  - Drops to 0 once a full day is missed; restarts at 1 on the next log.
  - Late-night / early-morning placements land on separate calendar days.
  - Future-dated placements do not extend the streak.
longest_streak():
  - Longest run anywhere in history.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from site_rotation.analytics.streaks import current_streak, longest_streak
from site_rotation.models.placement import PlacementEvent
from site_rotation.taxonomy.site_taxonomy import BodyLocation


def _on(*timestamps: datetime) -> list[PlacementEvent]:
    return [PlacementEvent.at_location(BodyLocation.LEFT_ARM, ts) for ts in timestamps]


class TestCurrentStreak:
    def test_no_events(self, now):
        assert current_streak([], now) == 0

    def test_consecutive_days_ending_today(self, now, place):
        events = [place(BodyLocation.LEFT_ARM, days_ago=d) for d in range(5)]
        assert current_streak(events, now) == 5

    def test_streak_ending_yesterday_still_counts(self, now, place):
        events = [place(BodyLocation.LEFT_ARM, days_ago=d) for d in (1, 2, 3)]
        assert current_streak(events, now) == 3

    def test_multiple_placements_one_day(self, now, place):
        events = [place(loc, days_ago=0) for loc in BodyLocation]
        assert current_streak(events, now) == 1

    def test_gap_breaks_streak(self, now, place):
        events = [place(BodyLocation.LEFT_ARM, days_ago=d) for d in (0, 1, 3, 4, 5)]
        assert current_streak(events, now) == 2

    def test_reset_and_restart(self):
        day = datetime(2026, 3, 1, 9, 0)
        events = _on(day)
        assert current_streak(events, day) == 1
        assert current_streak(events, day + timedelta(days=1)) == 1
        assert current_streak(events, day + timedelta(days=2)) == 0
        assert current_streak(events, day + timedelta(days=3)) == 0

        third = day + timedelta(days=3)
        assert current_streak(events + _on(third), third) == 1

    def test_calendar_day_boundaries(self):
        events = _on(datetime(2026, 2, 28, 23, 30), datetime(2026, 3, 1, 0, 30))
        assert current_streak(events, datetime(2026, 3, 1, 8, 0)) == 2

    def test_future_events_ignored(self, now, place):
        events = [place(BodyLocation.LEFT_ARM, days_ago=d) for d in (0, 1)]
        events += _on(now + timedelta(days=1), now + timedelta(days=2))
        assert current_streak(events, now) == 2

    def test_only_future_events(self, now):
        assert current_streak(_on(now + timedelta(days=3)), now) == 0


class TestLongestStreak:
    def test_no_events(self):
        assert longest_streak([]) == 0

    def test_single_day(self, place):
        assert longest_streak([place(BodyLocation.LEFT_ARM)]) == 1

    def test_longest_run_in_history(self, place):
        days = [0, 1, 10, 11, 12, 13, 14, 30, 31, 32]
        events = [place(BodyLocation.LEFT_ARM, days_ago=d) for d in days]
        assert longest_streak(events) == 5

    def test_longest_at_least_current(self, now, place):
        events = [place(BodyLocation.LEFT_ARM, days_ago=d) for d in range(4)]
        assert longest_streak(events) >= current_streak(events, now)
