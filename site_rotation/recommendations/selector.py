"""
Recommendation selector: picks the single best next placement site.

Ranking (evaluated over enabled sites only)
-------------------------------------------
    1. Exclude RESTING sites entirely — they are never recommended, even
       when nothing else is available.
    2. UNUSED sites rank first (treated as infinite rest).
    3. READY sites follow, longest rest (most days since last use) first.
    4. Ties are broken by catalog position: built-in declaration order,
       then custom sites by creation time.

When every active site is resting there is no recommendation and
``recommend()`` returns ``None``.  That is a meaningful result ("all sites
resting"), not an error.

The ranking has no randomness: identical inputs always give identical output.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Iterable, Optional, Sequence

from site_rotation.models.analytics import Recommendation, SiteStatusResult
from site_rotation.models.placement import PlacementEvent
from site_rotation.models.site import Site
from site_rotation.sites.catalog import catalog_position
from site_rotation.sites.status import classify_catalog
from site_rotation.taxonomy.site_taxonomy import SiteStatus

logger = logging.getLogger(__name__)

REASON_UNUSED = "Never used before"
REASON_LONGEST_REST = "Longest rest period among available sites"


@dataclass(frozen=True)
class RankedCandidate:
    """An eligible site with its ranking inputs.

    Attributes:
        status:   Classifier output for the site.
        position: Catalog index (tie-break, lower wins).
    """

    status: SiteStatusResult
    position: int

    @property
    def sort_key(self) -> tuple[int, int, int]:
        # Unused before ready; longer rest first; catalog order last.
        if self.status.status == SiteStatus.UNUSED:
            return (0, 0, self.position)
        return (1, -(self.status.days_since_last_use or 0), self.position)

    def to_recommendation(self) -> Recommendation:
        reason = (
            REASON_UNUSED
            if self.status.status == SiteStatus.UNUSED
            else REASON_LONGEST_REST
        )
        return Recommendation(
            site=self.status.site,
            days_since_last_use=self.status.days_since_last_use,
            reason=reason,
        )


def rank_candidates(
    catalog: Sequence[Site],
    events: Iterable[PlacementEvent],
    minimum_rest_days: int,
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> list[RankedCandidate]:
    """Return every eligible (unused or ready) site, best first.

    Raises:
        InvalidConfigurationError: If ``minimum_rest_days < 1`` or the
            active catalog is empty.
    """
    statuses = classify_catalog(catalog, events, minimum_rest_days, now, tz)
    positions = catalog_position(catalog)

    eligible = [
        RankedCandidate(status=s, position=positions[s.site.ref])
        for s in statuses
        if s.status in (SiteStatus.UNUSED, SiteStatus.READY)
    ]
    return sorted(eligible, key=lambda c: c.sort_key)


def recommend(
    catalog: Sequence[Site],
    events: Iterable[PlacementEvent],
    minimum_rest_days: int,
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> Optional[Recommendation]:
    """Recommend the next placement site.

    Args:
        catalog: Full site catalog (disabled sites are ignored).
        events: Placement history snapshot.
        minimum_rest_days: Rest period shared with the scoring path.
        now: Evaluation instant.
        tz: Local time zone for calendar-day boundaries.

    Returns:
        The top-ranked ``Recommendation``, or ``None`` when all sites rest.

    Raises:
        InvalidConfigurationError: If ``minimum_rest_days < 1`` or the
            active catalog is empty.
    """
    ranked = rank_candidates(catalog, events, minimum_rest_days, now, tz)
    if not ranked:
        logger.debug("No recommendation: all active sites are resting")
        return None

    best = ranked[0].to_recommendation()
    logger.debug(
        "Recommended %s (%s, %s days rested)",
        best.site.id, best.reason, best.days_since_last_use,
    )
    return best
