"""
Achievement taxonomy for rotation gamification.

Each ``AchievementType`` is measured by exactly one ``MetricShape`` against a
fixed threshold.  ``ACHIEVEMENT_RULES`` is the single source of truth for
that mapping; the evaluator in ``site_rotation.achievements.evaluator`` only
knows how to compute each shape's current value.

Tiers carry the point values shown on the achievements screen.

This module has NO imports from any other ``site_rotation`` package.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class AchievementTier(StrEnum):
    """Achievement tier; determines points awarded."""

    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"

    @property
    def points(self) -> int:
        return _TIER_POINTS[self]


_TIER_POINTS: dict[AchievementTier, int] = {
    AchievementTier.BRONZE:   10,
    AchievementTier.SILVER:   25,
    AchievementTier.GOLD:     50,
    AchievementTier.PLATINUM: 100,
}


class MetricShape(StrEnum):
    """How an achievement's current value is measured."""

    COUNT = "count"
    """Total placements logged."""

    ROTATION_CHANGES = "rotation_changes"
    """Placements whose site differs from the immediately preceding placement."""

    DISTINCT_SITES = "distinct_sites"
    """Number of distinct sites (built-in or custom) ever used."""

    DISTINCT_BUILTIN_SITES = "distinct_builtin_sites"
    """Number of distinct built-in body locations ever used."""

    STREAK = "streak"
    """Current consecutive-day logging streak."""

    DISTINCT_RUN = "distinct_run"
    """Most recent placements with no repeated site."""

    REST_COMPLIANCE = "rest_compliance"
    """Compliant pairs among the most recent N same-site reuse pairs."""

    HISTORY_SPAN = "history_span"
    """Calendar days between first and last placement (with a minimum count)."""

    HISTORY_AGE = "history_age"
    """Time since the first placement; ``threshold`` counts calendar years."""


class AchievementType(StrEnum):
    """Gamification milestones."""

    # ── Rotation ──────────────────────────────────────────────────────────────
    FIRST_PLACEMENT = "first_placement"
    ROTATION_ROOKIE = "rotation_rookie"
    ROTATION_PRO = "rotation_pro"
    ROTATION_MASTER = "rotation_master"
    PERFECT_ROTATION = "perfect_rotation"

    # ── Streaks ───────────────────────────────────────────────────────────────
    STREAK_STARTER = "streak_starter"
    STREAK_BUILDER = "streak_builder"
    STREAK_CHAMPION = "streak_champion"
    STREAK_LEGEND = "streak_legend"

    # ── Consistency ───────────────────────────────────────────────────────────
    CONSISTENT_LOGGER = "consistent_logger"
    REST_RESPECTOR = "rest_respector"
    ALL_SITES_EXPLORER = "all_sites_explorer"

    # ── Milestones ────────────────────────────────────────────────────────────
    CENTURION = "centurion"
    DEDICATION = "dedication"

    @property
    def rule(self) -> "AchievementRule":
        return ACHIEVEMENT_RULES[self]

    @property
    def title(self) -> str:
        return self.rule.title

    @property
    def description(self) -> str:
        return self.rule.description

    @property
    def tier(self) -> AchievementTier:
        return self.rule.tier

    @property
    def points(self) -> int:
        return self.rule.tier.points


@dataclass(frozen=True)
class AchievementRule:
    """Static definition of one achievement.

    Attributes:
        title:       Short display title.
        description: One-line description of the goal.
        tier:        Tier (and therefore point value).
        shape:       Metric family used to measure progress.
        threshold:   Metric value at which progress reaches 1.0 (years for
                     ``HISTORY_AGE``, otherwise in the metric's own unit).
        min_count:   Secondary placement-count requirement (``HISTORY_SPAN`` only).
    """

    title: str
    description: str
    tier: AchievementTier
    shape: MetricShape
    threshold: int
    min_count: int = 0


ACHIEVEMENT_RULES: dict[AchievementType, AchievementRule] = {
    AchievementType.FIRST_PLACEMENT: AchievementRule(
        "First Steps", "Log your first pump site placement",
        AchievementTier.BRONZE, MetricShape.COUNT, 1,
    ),
    AchievementType.ROTATION_ROOKIE: AchievementRule(
        "Rotation Rookie", "Use 5 different body sites",
        AchievementTier.BRONZE, MetricShape.DISTINCT_SITES, 5,
    ),
    AchievementType.ROTATION_PRO: AchievementRule(
        "Rotation Pro", "Log 20 placements with good rotation",
        AchievementTier.SILVER, MetricShape.ROTATION_CHANGES, 20,
    ),
    AchievementType.ROTATION_MASTER: AchievementRule(
        "Rotation Master", "Log 50 placements with good rotation",
        AchievementTier.GOLD, MetricShape.ROTATION_CHANGES, 50,
    ),
    AchievementType.PERFECT_ROTATION: AchievementRule(
        "Perfect Rotation", "Use 10 different sites in a row",
        AchievementTier.PLATINUM, MetricShape.DISTINCT_RUN, 10,
    ),
    AchievementType.STREAK_STARTER: AchievementRule(
        "Streak Starter", "Log placements for 7 days in a row",
        AchievementTier.BRONZE, MetricShape.STREAK, 7,
    ),
    AchievementType.STREAK_BUILDER: AchievementRule(
        "Streak Builder", "Log placements for 14 days in a row",
        AchievementTier.SILVER, MetricShape.STREAK, 14,
    ),
    AchievementType.STREAK_CHAMPION: AchievementRule(
        "Streak Champion", "Log placements for 30 days in a row",
        AchievementTier.GOLD, MetricShape.STREAK, 30,
    ),
    AchievementType.STREAK_LEGEND: AchievementRule(
        "Streak Legend", "Log placements for 90 days in a row",
        AchievementTier.PLATINUM, MetricShape.STREAK, 90,
    ),
    AchievementType.CONSISTENT_LOGGER: AchievementRule(
        "Consistent Logger", "Log every placement for a full month",
        AchievementTier.SILVER, MetricShape.HISTORY_SPAN, 30, min_count=4,
    ),
    AchievementType.REST_RESPECTOR: AchievementRule(
        "Rest Respector", "Always wait the minimum rest days (10+ reuses)",
        AchievementTier.SILVER, MetricShape.REST_COMPLIANCE, 10,
    ),
    AchievementType.ALL_SITES_EXPLORER: AchievementRule(
        "Site Explorer", "Try every built-in body site",
        AchievementTier.GOLD, MetricShape.DISTINCT_BUILTIN_SITES, 8,
    ),
    AchievementType.CENTURION: AchievementRule(
        "Centurion", "Log 100 pump site placements",
        AchievementTier.GOLD, MetricShape.COUNT, 100,
    ),
    AchievementType.DEDICATION: AchievementRule(
        "Dedicated", "Use the app for a full year",
        AchievementTier.PLATINUM, MetricShape.HISTORY_AGE, 1,
    ),
}
