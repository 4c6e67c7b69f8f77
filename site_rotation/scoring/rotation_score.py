"""
Rotation compliance scoring: how evenly and how patiently sites are rotated.

Score formula (sum of two components, 0–100)
--------------------------------------------
    total = floor(distribution_component + rest_compliance_component + 0.5)

distribution_component (0–50):
    Usage counts per active site, unused sites included as zeros.
    mean = placements / active sites.
    cv   = population stddev(counts) / mean.
    component = 50 * max(0, 1 - min(cv, 1)).
    Perfectly even usage (cv = 0) → 50; cv >= 1 → 0.
    No placements (mean = 0) → 0: no data, no credit.

rest_compliance_component (0–50):
    For every site, each pair of consecutive uses is a "reuse pair".
    A pair is compliant when the calendar days between its two local
    dates are >= minimum_rest_days.
    component = 50 * compliant_pairs / total_pairs.
    No reuse pairs at all → 50: no violation observed yet.

Only placements at active (enabled) sites count, inside the optional
inclusive ``[window_start, window_end]``.

Score bands (thresholds are fixed; wording is presentation)
-----------------------------------------------------------
    total <  50        → needs improvement
    50 <= total <= 75  → good, room to improve
    total >  75        → excellent
"""

from __future__ import annotations

import logging
import math
import statistics
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Iterable, Optional, Sequence

from site_rotation.models.analytics import RotationScore
from site_rotation.models.placement import PlacementEvent
from site_rotation.models.site import Site, SiteRef
from site_rotation.sites.catalog import active_sites, require_rest_days
from site_rotation.utils.time_utils import calendar_days_between, in_window

logger = logging.getLogger(__name__)

COMPONENT_MAX = 50.0

BAND_NEEDS_IMPROVEMENT = "needs_improvement"
BAND_GOOD = "good"
BAND_EXCELLENT = "excellent"


@dataclass(frozen=True)
class ReusePair:
    """Two consecutive placements at the same site.

    Attributes:
        site_ref:     Site reused.
        previous_at:  Earlier placement time.
        reused_at:    Later placement time.
        elapsed_days: Calendar days between the two placements.
    """

    site_ref:     SiteRef
    previous_at:  datetime
    reused_at:    datetime
    elapsed_days: int

    def is_compliant(self, minimum_rest_days: int) -> bool:
        return self.elapsed_days >= minimum_rest_days


def reuse_pairs(
    events: Iterable[PlacementEvent],
    tz: Optional[tzinfo] = None,
) -> list[ReusePair]:
    """Build every consecutive same-site pair, ordered by ``reused_at``.

    Args:
        events: Placements (any order).
        tz: Local time zone for calendar-day boundaries.

    Returns:
        One ``ReusePair`` per reuse, sorted chronologically by the reuse.
    """
    by_site: dict[SiteRef, list[datetime]] = defaultdict(list)
    for event in events:
        by_site[event.site_ref].append(event.placed_at)

    pairs: list[ReusePair] = []
    for ref, times in by_site.items():
        times.sort()
        for prev, curr in zip(times, times[1:]):
            pairs.append(
                ReusePair(
                    site_ref=ref,
                    previous_at=prev,
                    reused_at=curr,
                    elapsed_days=calendar_days_between(prev, curr, tz),
                )
            )
    pairs.sort(key=lambda p: (p.reused_at, p.site_ref.key))
    return pairs


def compliance_counts(
    pairs: Iterable[ReusePair],
    minimum_rest_days: int,
) -> tuple[int, int]:
    """Return ``(compliant_pairs, total_pairs)``."""
    compliant = 0
    total = 0
    for pair in pairs:
        total += 1
        if pair.is_compliant(minimum_rest_days):
            compliant += 1
    return compliant, total


def distribution_component(counts: Sequence[int]) -> float:
    """Evenness of usage across sites, 0–50 (see module docstring)."""
    if not counts:
        return 0.0
    mean = sum(counts) / len(counts)
    if mean == 0:
        return 0.0
    cv = statistics.pstdev(counts) / mean
    return COMPONENT_MAX * max(0.0, 1.0 - min(cv, 1.0))


def rest_compliance_component(compliant: int, total: int) -> float:
    """Share of compliant reuse pairs, 0–50; full credit with no pairs."""
    if total == 0:
        return COMPONENT_MAX
    return COMPONENT_MAX * compliant / total


def score_band(total: int) -> str:
    """Map a total score to its band name."""
    if total < 50:
        return BAND_NEEDS_IMPROVEMENT
    if total <= 75:
        return BAND_GOOD
    return BAND_EXCELLENT


def build_explanation(
    total: int,
    distribution: float,
    rest: float,
    total_pairs: int,
) -> str:
    """Assemble the human-readable explanation for a score.

    The opening sentence is fixed per band; a second sentence names the
    weaker component so the user knows what to work on.
    """
    band = score_band(total)
    if band == BAND_EXCELLENT:
        opening = "Excellent rotation! You're spreading placements evenly and giving sites time to heal."
    elif band == BAND_GOOD:
        opening = "Good rotation pattern, with room to improve."
    else:
        opening = "Your rotation needs improvement."

    if distribution == 0.0 and total_pairs == 0:
        detail = "Log placements across your sites to build a rotation history."
    elif distribution < rest:
        detail = "Try using all of your enabled sites more evenly."
    elif rest < distribution:
        detail = "Wait the full rest period before reusing a site."
    elif band == BAND_EXCELLENT:
        detail = "Keep it up."
    else:
        detail = "Spread placements evenly and respect the rest period."
    return f"{opening} {detail}"


def score(
    catalog: Sequence[Site],
    events: Iterable[PlacementEvent],
    minimum_rest_days: int,
    window_start: Optional[datetime] = None,
    window_end: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> RotationScore:
    """Compute the rotation compliance score.

    Args:
        catalog: Full site catalog (disabled sites are ignored).
        events: Placement history snapshot.
        minimum_rest_days: Rest period shared with the recommendation path.
        window_start: Inclusive lower bound on ``placed_at``; ``None`` = open.
        window_end: Inclusive upper bound on ``placed_at``; ``None`` = open.
        tz: Local time zone for calendar-day boundaries.

    Returns:
        ``RotationScore`` with both components and an explanation.

    Raises:
        InvalidConfigurationError: If ``minimum_rest_days < 1`` or the
            active catalog is empty.
    """
    require_rest_days(minimum_rest_days)
    sites = active_sites(catalog)
    active_refs = {site.ref for site in sites}

    scoped = [
        e for e in events
        if e.site_ref in active_refs and in_window(e.placed_at, window_start, window_end)
    ]

    usage: dict[SiteRef, int] = {ref: 0 for ref in active_refs}
    for event in scoped:
        usage[event.site_ref] += 1
    distribution = distribution_component([usage[site.ref] for site in sites])

    compliant, total_pairs = compliance_counts(reuse_pairs(scoped, tz), minimum_rest_days)
    rest = rest_compliance_component(compliant, total_pairs)

    total = _clamp(math.floor(distribution + rest + 0.5), 0, 100)

    logger.debug(
        "Rotation score %d (distribution %.2f, rest %.2f; %d/%d compliant pairs, %d events)",
        total, distribution, rest, compliant, total_pairs, len(scoped),
    )

    return RotationScore(
        total=total,
        distribution_component=round(distribution, 2),
        rest_compliance_component=round(rest, 2),
        explanation=build_explanation(total, distribution, rest, total_pairs),
    )


# ── Helper ────────────────────────────────────────────────────────────────────

def _clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, value))
