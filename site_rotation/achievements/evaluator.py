"""
Achievement progress evaluation.

Every achievement is measured by one ``MetricShape`` against a threshold
(see ``ACHIEVEMENT_RULES``):

    progress = min(1.0, metric_value / threshold)

Metric shapes
-------------
count                  : total placements.
rotation_changes       : placements whose site differs from the previous one
                         (the first placement always counts).
distinct_sites         : distinct sites ever used.
distinct_builtin_sites : distinct built-in body locations ever used.
streak                 : current logging streak (``analytics.streaks``).
distinct_run           : most recent placements with no repeated site.
rest_compliance        : compliant pairs among the most recent N reuse
                         pairs, scored with the same rest logic as the
                         rotation score.  Fewer than N pairs is partial
                         progress.
history_span           : days between first and last placement; also needs
                         ``min_count`` placements (the lower ratio wins).
history_age            : calendar years since the first placement.  Earned
                         once the first placement is on or before the same
                         local date ``threshold`` years ago (Feb 29 maps to
                         Feb 28); a year spanning Feb 29 needs 366 days.

Every shape evaluates to 0 with no history — never an error.

Earning is the collaborator's job: ``newly_earned()`` lists types whose
progress reached 1.0 and that are not already earned, and the caller
persists exactly those (see ``achievements.awards``).
"""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Collection, Iterable, Optional, Sequence

from site_rotation.analytics.streaks import current_streak
from site_rotation.models.analytics import AchievementProgress
from site_rotation.models.placement import PlacementEvent
from site_rotation.models.site import BuiltinSiteRef, Site
from site_rotation.scoring.rotation_score import compliance_counts, reuse_pairs
from site_rotation.sites.catalog import require_rest_days
from site_rotation.taxonomy.achievement_taxonomy import (
    AchievementType,
    MetricShape,
)
from site_rotation.utils.time_utils import calendar_days_between, local_date, years_before

logger = logging.getLogger(__name__)


# ── Metric values ─────────────────────────────────────────────────────────────


def _chronological(events: Iterable[PlacementEvent]) -> list[PlacementEvent]:
    return sorted(events, key=lambda e: (e.placed_at, str(e.event_id)))


def rotation_changes(events: Sequence[PlacementEvent]) -> int:
    """Count placements whose site differs from the immediately preceding one."""
    changes = 0
    previous = None
    for event in _chronological(events):
        if event.site_ref != previous:
            changes += 1
        previous = event.site_ref
    return changes


def distinct_run(events: Sequence[PlacementEvent]) -> int:
    """Length of the trailing run of placements with no repeated site."""
    seen = set()
    run = 0
    for event in reversed(_chronological(events)):
        if event.site_ref in seen:
            break
        seen.add(event.site_ref)
        run += 1
    return run


def recent_rest_compliance(
    events: Sequence[PlacementEvent],
    minimum_rest_days: int,
    window_pairs: int,
    tz: Optional[tzinfo] = None,
) -> int:
    """Compliant pairs among the most recent ``window_pairs`` reuse pairs."""
    pairs = reuse_pairs(events, tz)[-window_pairs:]
    compliant, _ = compliance_counts(pairs, minimum_rest_days)
    return compliant


def _metric_value(
    shape: MetricShape,
    events: Sequence[PlacementEvent],
    now: datetime,
    minimum_rest_days: int,
    threshold: int,
    tz: Optional[tzinfo],
) -> float:
    if shape == MetricShape.COUNT:
        return float(len(events))
    if shape == MetricShape.ROTATION_CHANGES:
        return float(rotation_changes(events))
    if shape == MetricShape.DISTINCT_SITES:
        return float(len({e.site_ref for e in events}))
    if shape == MetricShape.DISTINCT_BUILTIN_SITES:
        return float(len({e.site_ref for e in events if isinstance(e.site_ref, BuiltinSiteRef)}))
    if shape == MetricShape.STREAK:
        return float(current_streak(events, now, tz))
    if shape == MetricShape.DISTINCT_RUN:
        return float(distinct_run(events))
    if shape == MetricShape.REST_COMPLIANCE:
        return float(recent_rest_compliance(events, minimum_rest_days, threshold, tz))
    if shape == MetricShape.HISTORY_SPAN:
        if not events:
            return 0.0
        ordered = _chronological(events)
        return float(max(0, calendar_days_between(ordered[0].placed_at, ordered[-1].placed_at, tz)))
    if shape == MetricShape.HISTORY_AGE:
        if not events:
            return 0.0
        today = local_date(now, tz)
        first = local_date(_chronological(events)[0].placed_at, tz)
        span = (today - years_before(today, threshold)).days
        return threshold * max(0, (today - first).days) / span
    raise ValueError(f"Unhandled metric shape '{shape}'.")


# ── Progress ──────────────────────────────────────────────────────────────────


def achievement_progress(
    achievement_type: AchievementType,
    events: Iterable[PlacementEvent],
    catalog: Sequence[Site],
    now: datetime,
    minimum_rest_days: int,
    tz: Optional[tzinfo] = None,
) -> float:
    """Return progress (0–1) toward ``achievement_type``.

    Args:
        achievement_type: Achievement to evaluate.
        events: Placement history snapshot.
        catalog: Site catalog.  Placements at sites missing from the
            catalog (deleted custom sites) do not count.
        now: Evaluation instant (streak and history-age shapes).
        minimum_rest_days: Rest period for the rest-compliance shape.
        tz: Local time zone for calendar-day boundaries.

    Raises:
        InvalidConfigurationError: If ``minimum_rest_days < 1``.
    """
    require_rest_days(minimum_rest_days)
    known_refs = {site.ref for site in catalog}
    history = [e for e in events if e.site_ref in known_refs]

    rule = achievement_type.rule
    value = _metric_value(rule.shape, history, now, minimum_rest_days, rule.threshold, tz)
    progress = min(1.0, value / rule.threshold)
    if rule.min_count:
        progress = min(progress, len(history) / rule.min_count)
    return max(0.0, progress)


def evaluate_all(
    events: Iterable[PlacementEvent],
    catalog: Sequence[Site],
    now: datetime,
    minimum_rest_days: int,
    earned: Collection[AchievementType] = (),
    tz: Optional[tzinfo] = None,
) -> list[AchievementProgress]:
    """Evaluate every achievement type, in declaration order.

    Args:
        earned: Types the caller has already persisted as earned.

    Returns:
        One ``AchievementProgress`` per ``AchievementType``.
    """
    history = list(events)
    results = [
        AchievementProgress(
            achievement_type=atype,
            progress=achievement_progress(atype, history, catalog, now, minimum_rest_days, tz),
            earned=atype in earned,
        )
        for atype in AchievementType
    ]
    logger.debug(
        "Evaluated %d achievements: %d complete, %d already earned",
        len(results),
        sum(r.is_complete for r in results),
        sum(r.earned for r in results),
    )
    return results


def newly_earned(progress: Iterable[AchievementProgress]) -> list[AchievementType]:
    """Types that just reached 1.0 and have not been earned before."""
    return [p.achievement_type for p in progress if p.is_complete and not p.earned]


def total_points(earned: Iterable[AchievementType]) -> int:
    """Sum of tier points over distinct earned types."""
    return sum(atype.points for atype in set(earned))
