"""
Tests for site_rotation/achievements/evaluator.py.

What we test
------------
achievement_progress():
  - Every type reports 0.0 with no history.
  - Count, distinct-site, rotation-change, distinct-run, streak,
    rest-compliance, history-span and history-age shapes.
  - Progress is capped at 1.0.
  - Placements at sites missing from the catalog do not count.
  - minimum_rest_days < 1 raises InvalidConfigurationError.
evaluate_all() / newly_earned() / total_points():
  - One result per type in declaration order; earned flags respected.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from site_rotation.achievements.evaluator import (
    achievement_progress,
    distinct_run,
    evaluate_all,
    newly_earned,
    rotation_changes,
    total_points,
)
from site_rotation.models.placement import PlacementEvent
from site_rotation.models.site import CustomSite, CustomSiteRef
from site_rotation.sites.catalog import InvalidConfigurationError, build_catalog
from site_rotation.taxonomy.achievement_taxonomy import AchievementType
from site_rotation.taxonomy.site_taxonomy import BodyLocation

LOCS = list(BodyLocation)


def _sequence(locations: list[BodyLocation], now: datetime, gap_days: int = 1) -> list[PlacementEvent]:
    """Placements in the given order, the last one at ``now``."""
    n = len(locations)
    return [
        PlacementEvent.at_location(loc, now - timedelta(days=gap_days * (n - 1 - i)))
        for i, loc in enumerate(locations)
    ]


class TestEmptyHistory:
    @pytest.mark.parametrize("atype", list(AchievementType))
    def test_zero_progress(self, atype, catalog, now):
        assert achievement_progress(atype, [], catalog, now, 18) == 0.0


class TestCountShapes:
    def test_first_placement(self, catalog, now, place):
        events = [place(BodyLocation.LEFT_ARM)]
        assert achievement_progress(AchievementType.FIRST_PLACEMENT, events, catalog, now, 18) == 1.0

    def test_centurion_partial(self, catalog, now):
        events = _sequence([LOCS[i % 8] for i in range(50)], now)
        assert achievement_progress(AchievementType.CENTURION, events, catalog, now, 18) == 0.5

    def test_progress_capped(self, catalog, now):
        events = _sequence([LOCS[i % 8] for i in range(120)], now)
        assert achievement_progress(AchievementType.CENTURION, events, catalog, now, 18) == 1.0


class TestSiteShapes:
    def test_rotation_rookie(self, catalog, now):
        two = _sequence(LOCS[:2], now)
        five = _sequence(LOCS[:5], now)
        assert achievement_progress(AchievementType.ROTATION_ROOKIE, two, catalog, now, 18) == 0.4
        assert achievement_progress(AchievementType.ROTATION_ROOKIE, five, catalog, now, 18) == 1.0

    def test_all_sites_explorer_ignores_custom(self, now):
        custom = CustomSite(custom_id=uuid4(), name="Hip", created_at=datetime(2026, 1, 1))
        catalog = build_catalog([custom])
        events = _sequence(LOCS[:4], now)
        events.append(PlacementEvent(site_ref=custom.ref, placed_at=now))
        assert achievement_progress(AchievementType.ALL_SITES_EXPLORER, events, catalog, now, 18) == 0.5
        assert achievement_progress(AchievementType.ROTATION_ROOKIE, events, catalog, now, 18) == 1.0

    def test_rotation_changes(self, now):
        events = _sequence(
            [BodyLocation.LEFT_ARM, BodyLocation.LEFT_ARM, BodyLocation.RIGHT_ARM, BodyLocation.LEFT_ARM],
            now,
        )
        assert rotation_changes(events) == 3

    def test_rotation_pro_partial(self, catalog, now):
        events = _sequence([LOCS[i % 2] for i in range(10)], now)
        assert achievement_progress(AchievementType.ROTATION_PRO, events, catalog, now, 18) == 0.5

    def test_distinct_run(self, now):
        events = _sequence(
            [BodyLocation.LEFT_ARM, BodyLocation.RIGHT_ARM, BodyLocation.LOWER_BACK, BodyLocation.LEFT_ARM],
            now,
        )
        assert distinct_run(events) == 3

    def test_perfect_rotation_needs_ten_sites(self, catalog, now):
        events = _sequence(LOCS, now)
        assert achievement_progress(AchievementType.PERFECT_ROTATION, events, catalog, now, 18) == 0.8

    def test_unknown_site_placements_ignored(self, catalog, now):
        ghost = PlacementEvent(site_ref=CustomSiteRef(custom_id=uuid4()), placed_at=now)
        assert achievement_progress(AchievementType.FIRST_PLACEMENT, [ghost], catalog, now, 18) == 0.0


class TestTimeShapes:
    def test_streak_starter(self, catalog, now, place):
        events = [place(BodyLocation.LEFT_ARM, days_ago=d) for d in range(7)]
        assert achievement_progress(AchievementType.STREAK_STARTER, events, catalog, now, 18) == 1.0
        assert achievement_progress(AchievementType.STREAK_BUILDER, events, catalog, now, 18) == 0.5

    def test_broken_streak_zero(self, catalog, now, place):
        events = [place(BodyLocation.LEFT_ARM, days_ago=d) for d in range(5, 12)]
        assert achievement_progress(AchievementType.STREAK_STARTER, events, catalog, now, 18) == 0.0

    def test_consistent_logger_needs_span_and_count(self, catalog, now, place):
        sparse = [place(BodyLocation.LEFT_ARM, days_ago=d) for d in (30, 0)]
        enough = [place(LOCS[i], days_ago=d) for i, d in enumerate((30, 20, 10, 0))]
        short = [place(LOCS[i], days_ago=d) for i, d in enumerate((15, 10, 5, 0))]
        assert achievement_progress(AchievementType.CONSISTENT_LOGGER, sparse, catalog, now, 18) == 0.5
        assert achievement_progress(AchievementType.CONSISTENT_LOGGER, enough, catalog, now, 18) == 1.0
        assert achievement_progress(AchievementType.CONSISTENT_LOGGER, short, catalog, now, 18) == 0.5

    def test_dedication(self, catalog, now, place):
        year = [place(BodyLocation.LEFT_ARM, days_ago=365)]
        half = [place(BodyLocation.LEFT_ARM, days_ago=73)]
        assert achievement_progress(AchievementType.DEDICATION, year, catalog, now, 18) == 1.0
        assert achievement_progress(AchievementType.DEDICATION, half, catalog, now, 18) == pytest.approx(0.2)

    def test_dedication_spans_leap_day(self, catalog):
        now = datetime(2028, 2, 29, 9, 0)
        just_short = [PlacementEvent.at_location(BodyLocation.LEFT_ARM, datetime(2027, 3, 1, 9, 0))]
        full_year = [PlacementEvent.at_location(BodyLocation.LEFT_ARM, datetime(2027, 2, 28, 9, 0))]
        assert achievement_progress(
            AchievementType.DEDICATION, just_short, catalog, now, 18
        ) == pytest.approx(365 / 366)
        assert achievement_progress(AchievementType.DEDICATION, full_year, catalog, now, 18) == 1.0


class TestRestRespector:
    def test_compliant_reuses(self, catalog, now):
        # Two sites alternating every 10 days: every reuse waits 20 days.
        events = _sequence([LOCS[i % 2] for i in range(12)], now, gap_days=10)
        assert achievement_progress(AchievementType.REST_RESPECTOR, events, catalog, now, 18) == 1.0

    def test_violations_reduce_progress(self, catalog, now):
        events = _sequence([LOCS[i % 2] for i in range(12)], now, gap_days=5)
        assert achievement_progress(AchievementType.REST_RESPECTOR, events, catalog, now, 18) == 0.0

    def test_few_pairs_partial(self, catalog, now):
        events = _sequence([LOCS[i % 2] for i in range(4)], now, gap_days=10)
        assert achievement_progress(AchievementType.REST_RESPECTOR, events, catalog, now, 18) == 0.2

    def test_invalid_rest_days(self, catalog, now):
        with pytest.raises(InvalidConfigurationError):
            achievement_progress(AchievementType.REST_RESPECTOR, [], catalog, now, 0)


class TestEvaluateAll:
    def test_declaration_order(self, catalog, now):
        results = evaluate_all([], catalog, now, 18)
        assert [r.achievement_type for r in results] == list(AchievementType)

    def test_earned_flags_and_newly_earned(self, catalog, now):
        events = _sequence(LOCS[:5], now)
        results = evaluate_all(events, catalog, now, 18, earned={AchievementType.FIRST_PLACEMENT})
        by_type = {r.achievement_type: r for r in results}
        assert by_type[AchievementType.FIRST_PLACEMENT].earned is True
        assert newly_earned(results) == [AchievementType.ROTATION_ROOKIE]

    def test_total_points(self):
        earned = [AchievementType.FIRST_PLACEMENT, AchievementType.ROTATION_PRO, AchievementType.FIRST_PLACEMENT]
        assert total_points(earned) == 10 + 25
        assert total_points([]) == 0
