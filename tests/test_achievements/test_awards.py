"""
Tests for site_rotation/achievements/awards.py.

What we test
------------
award_new_achievements():
  - Persists every achievement that just reached full progress.
  - Re-running with unchanged history awards nothing new.
  - Earned achievements stay earned after their metric drops.
"""

from __future__ import annotations

from datetime import timedelta

from site_rotation.achievements.awards import award_new_achievements
from site_rotation.db.repositories.achievement_repo import AchievementRepository
from site_rotation.taxonomy.achievement_taxonomy import AchievementType
from site_rotation.taxonomy.site_taxonomy import BodyLocation


class TestAwardNewAchievements:
    def test_first_placement_awarded(self, in_memory_db, catalog, now, place):
        repo = AchievementRepository(in_memory_db)
        awarded = award_new_achievements(repo, [place(BodyLocation.LEFT_ARM)], catalog, now, 18)
        assert [a.achievement_type for a in awarded] == [AchievementType.FIRST_PLACEMENT]
        assert awarded[0].earned_at == now
        assert repo.earned_types() == {AchievementType.FIRST_PLACEMENT}

    def test_idempotent(self, in_memory_db, catalog, now, place):
        repo = AchievementRepository(in_memory_db)
        events = [place(loc, days_ago=i) for i, loc in enumerate(list(BodyLocation)[:5])]
        first = award_new_achievements(repo, events, catalog, now, 18)
        second = award_new_achievements(repo, events, catalog, now, 18)
        assert {a.achievement_type for a in first} == {
            AchievementType.FIRST_PLACEMENT,
            AchievementType.ROTATION_ROOKIE,
        }
        assert second == []
        assert len(repo.list_all()) == 2

    def test_streak_stays_earned(self, in_memory_db, catalog, now, place):
        repo = AchievementRepository(in_memory_db)
        events = [place(BodyLocation.LEFT_ARM, days_ago=d) for d in range(7)]
        award_new_achievements(repo, events, catalog, now, 18)
        assert AchievementType.STREAK_STARTER in repo.earned_types()

        later = now + timedelta(days=10)
        assert award_new_achievements(repo, events, catalog, later, 18) == []
        assert AchievementType.STREAK_STARTER in repo.earned_types()
        assert repo.total_points() == 10 + 10
