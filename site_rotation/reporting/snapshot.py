"""
One-shot rotation snapshot for consuming surfaces.

``build_snapshot()`` runs every engine computation once over a single
consistent read of the event store (catalog + placements) and bundles the
results, so a dashboard, widget refresh or export never mixes outputs
computed from different histories.

``snapshot_to_dict()`` converts the snapshot to JSON-safe primitives for
``export_to_json``.
"""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Collection, Iterable, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from site_rotation.achievements.evaluator import evaluate_all
from site_rotation.analytics.heatmap import heatmap
from site_rotation.analytics.streaks import current_streak, longest_streak
from site_rotation.analytics.trends import TrendGrouping, trend
from site_rotation.models.analytics import (
    AchievementProgress,
    HeatmapEntry,
    Recommendation,
    RotationScore,
    SiteStatusResult,
    TrendPoint,
)
from site_rotation.models.placement import PlacementEvent
from site_rotation.models.site import RotationConfig, Site
from site_rotation.recommendations.selector import recommend
from site_rotation.scoring.rotation_score import score
from site_rotation.sites.status import classify_catalog
from site_rotation.taxonomy.achievement_taxonomy import AchievementType
from site_rotation.utils.time_utils import trailing_days_window

logger = logging.getLogger(__name__)


class RotationSnapshot(BaseModel):
    """Every engine output for one ``(catalog, events, config, now)`` input."""

    model_config = ConfigDict(frozen=True)

    generated_at: datetime
    minimum_rest_days: int
    event_count: int
    statuses: list[SiteStatusResult]
    recommendation: Optional[Recommendation]
    score: RotationScore
    current_streak: int
    longest_streak: int
    heatmap: list[HeatmapEntry]
    trend: list[TrendPoint]
    achievements: list[AchievementProgress]


def build_snapshot(
    catalog: Sequence[Site],
    events: Iterable[PlacementEvent],
    rotation: RotationConfig,
    now: datetime,
    tz: Optional[tzinfo] = None,
    trend_days: int = 7,
    group_by: TrendGrouping | str = TrendGrouping.DAY,
    week_start: int = 0,
    earned: Collection[AchievementType] = (),
) -> RotationSnapshot:
    """Compute every engine output once.

    Raises:
        InvalidConfigurationError: If the active catalog is empty.
    """
    history = list(events)
    rest_days = rotation.minimum_rest_days
    window_start, window_end = trailing_days_window(now, trend_days, tz)

    snapshot = RotationSnapshot(
        generated_at=now,
        minimum_rest_days=rest_days,
        event_count=len(history),
        statuses=classify_catalog(catalog, history, rest_days, now, tz),
        recommendation=recommend(catalog, history, rest_days, now, tz),
        score=score(catalog, history, rest_days, tz=tz),
        current_streak=current_streak(history, now, tz),
        longest_streak=longest_streak(history, tz),
        heatmap=heatmap(catalog, history),
        trend=trend(history, group_by, window_start, window_end, tz=tz, week_start=week_start),
        achievements=evaluate_all(history, catalog, now, rest_days, earned=earned, tz=tz),
    )
    logger.info(
        "Built snapshot: %d events, score %d, streak %d",
        snapshot.event_count, snapshot.score.total, snapshot.current_streak,
    )
    return snapshot


def snapshot_to_dict(snapshot: RotationSnapshot) -> dict:
    """Return a JSON-safe dict (datetimes, dates and UUIDs as strings)."""
    return snapshot.model_dump(mode="json")
