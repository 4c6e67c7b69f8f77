"""
Gamification collaborator: persist achievements the moment they are reached.

The evaluator only reports progress.  ``award_new_achievements()`` reads the
already-earned set, evaluates everything once, and awards each type whose
progress just reached 1.0.  Re-running it with unchanged history awards
nothing.
"""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Iterable, Optional, Sequence

from site_rotation.achievements.evaluator import evaluate_all, newly_earned
from site_rotation.db.repositories.achievement_repo import AchievementRepository
from site_rotation.models.achievement import Achievement
from site_rotation.models.placement import PlacementEvent
from site_rotation.models.site import Site

logger = logging.getLogger(__name__)


def award_new_achievements(
    repo: AchievementRepository,
    events: Iterable[PlacementEvent],
    catalog: Sequence[Site],
    now: datetime,
    minimum_rest_days: int,
    tz: Optional[tzinfo] = None,
) -> list[Achievement]:
    """Award every newly completed achievement and return the new records."""
    progress = evaluate_all(
        events, catalog, now, minimum_rest_days, earned=repo.earned_types(), tz=tz
    )
    awarded = []
    for atype in newly_earned(progress):
        achievement = Achievement(achievement_type=atype, earned_at=now)
        if repo.award(achievement):
            awarded.append(achievement)
    if awarded:
        logger.info("Awarded %d new achievement(s)", len(awarded))
    return awarded
