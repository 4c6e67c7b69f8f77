"""
Tests for site_rotation/sites/status.py.

What we test
------------
classify():
  - Never-used sites are UNUSED with days_since_last_use None.
  - Rest boundary is inclusive: days == minimum_rest_days is READY,
    one day less is RESTING.
  - Only the most recent placement at the site matters.
  - Days are calendar days: 23:30 -> 00:30 next day is one day; a 30-hour
    gap is one or two days depending on where midnight falls.
  - Aware timestamps are converted into the given time zone.
  - minimum_rest_days < 1 raises InvalidConfigurationError.
classify_catalog():
  - One result per active site, catalog order; disabled sites excluded.
describe_status() / rest_days_remaining():
  - Wording for unused, today, yesterday, resting and ready sites.
"""

from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from site_rotation.models.placement import PlacementEvent
from site_rotation.models.site import Site
from site_rotation.sites.catalog import InvalidConfigurationError, build_catalog
from site_rotation.sites.status import (
    classify,
    classify_catalog,
    describe_status,
    rest_days_remaining,
)
from site_rotation.taxonomy.site_taxonomy import BodyLocation, SiteStatus

LEFT_ARM = Site.builtin(BodyLocation.LEFT_ARM)


class TestClassify:
    def test_unused(self, now):
        result = classify(LEFT_ARM, [], 18, now)
        assert result.status == SiteStatus.UNUSED
        assert result.days_since_last_use is None

    def test_boundary_day_is_ready(self, now, place):
        result = classify(LEFT_ARM, [place(BodyLocation.LEFT_ARM, days_ago=18)], 18, now)
        assert result.status == SiteStatus.READY
        assert result.days_since_last_use == 18

    def test_day_before_boundary_is_resting(self, now, place):
        result = classify(LEFT_ARM, [place(BodyLocation.LEFT_ARM, days_ago=17)], 18, now)
        assert result.status == SiteStatus.RESTING
        assert result.days_since_last_use == 17

    def test_used_today_is_resting(self, now, place):
        result = classify(LEFT_ARM, [place(BodyLocation.LEFT_ARM)], 1, now)
        assert result.status == SiteStatus.RESTING
        assert result.days_since_last_use == 0

    def test_most_recent_use_wins(self, now, place):
        events = [
            place(BodyLocation.LEFT_ARM, days_ago=40),
            place(BodyLocation.LEFT_ARM, days_ago=3),
            place(BodyLocation.LEFT_ARM, days_ago=25),
        ]
        result = classify(LEFT_ARM, events, 18, now)
        assert result.days_since_last_use == 3
        assert result.status == SiteStatus.RESTING

    def test_other_sites_ignored(self, now, place):
        result = classify(LEFT_ARM, [place(BodyLocation.RIGHT_ARM, days_ago=1)], 18, now)
        assert result.status == SiteStatus.UNUSED

    def test_invalid_rest_days(self, now):
        with pytest.raises(InvalidConfigurationError):
            classify(LEFT_ARM, [], 0, now)


class TestCalendarDays:
    def test_late_night_to_early_morning_is_one_day(self):
        event = PlacementEvent.at_location(BodyLocation.LEFT_ARM, datetime(2026, 2, 28, 23, 30))
        result = classify(LEFT_ARM, [event], 1, datetime(2026, 3, 1, 0, 30))
        assert result.days_since_last_use == 1
        assert result.status == SiteStatus.READY

    def test_thirty_hours_spanning_two_midnights(self):
        event = PlacementEvent.at_location(BodyLocation.LEFT_ARM, datetime(2026, 2, 27, 20, 0))
        result = classify(LEFT_ARM, [event], 18, datetime(2026, 3, 1, 2, 0))
        assert result.days_since_last_use == 2

    def test_thirty_hours_spanning_one_midnight(self):
        event = PlacementEvent.at_location(BodyLocation.LEFT_ARM, datetime(2026, 2, 28, 1, 0))
        result = classify(LEFT_ARM, [event], 18, datetime(2026, 3, 1, 7, 0))
        assert result.days_since_last_use == 1

    def test_aware_timestamps_use_local_zone(self):
        # 03:00 UTC on Mar 1 is still Feb 28 in New York.
        event = PlacementEvent.at_location(
            BodyLocation.LEFT_ARM, datetime(2026, 3, 1, 3, 0, tzinfo=timezone.utc)
        )
        now = datetime(2026, 3, 1, 14, 0, tzinfo=timezone.utc)
        local = classify(LEFT_ARM, [event], 18, now, tz=ZoneInfo("America/New_York"))
        utc = classify(LEFT_ARM, [event], 18, now)
        assert local.days_since_last_use == 1
        assert utc.days_since_last_use == 0


class TestClassifyCatalog:
    def test_one_result_per_active_site(self, catalog, now, place):
        results = classify_catalog(catalog, [place(BodyLocation.ABDOMEN_LEFT, days_ago=2)], 18, now)
        assert len(results) == 8
        assert [r.site for r in results] == catalog
        assert results[2].status == SiteStatus.RESTING
        assert sum(r.status == SiteStatus.UNUSED for r in results) == 7

    def test_disabled_sites_excluded(self, now):
        catalog = build_catalog(disabled_locations=[BodyLocation.LEFT_ARM])
        results = classify_catalog(catalog, [], 18, now)
        assert len(results) == 7
        assert all(r.site.ref.location != BodyLocation.LEFT_ARM for r in results)

    def test_empty_active_catalog_raises(self, now):
        catalog = build_catalog(disabled_locations=list(BodyLocation))
        with pytest.raises(InvalidConfigurationError):
            classify_catalog(catalog, [], 18, now)


class TestDescribeStatus:
    @pytest.mark.parametrize(
        "days_ago, expected",
        [
            (0, "Used today"),
            (1, "Used yesterday"),
            (16, "Rest 2 more days"),
            (17, "Rest 1 more day"),
            (18, "Ready (18d rest)"),
        ],
    )
    def test_wording(self, now, place, days_ago, expected):
        result = classify(LEFT_ARM, [place(BodyLocation.LEFT_ARM, days_ago=days_ago)], 18, now)
        assert describe_status(result, 18) == expected

    def test_unused_wording(self, now):
        assert describe_status(classify(LEFT_ARM, [], 18, now), 18) == "Available"

    def test_rest_days_remaining(self, now, place):
        resting = classify(LEFT_ARM, [place(BodyLocation.LEFT_ARM, days_ago=5)], 18, now)
        ready = classify(LEFT_ARM, [place(BodyLocation.LEFT_ARM, days_ago=30)], 18, now)
        assert rest_days_remaining(resting, 18) == 13
        assert rest_days_remaining(ready, 18) == 0
        assert rest_days_remaining(classify(LEFT_ARM, [], 18, now), 18) == 0
