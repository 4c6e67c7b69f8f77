"""
Usage heatmap: per-site placement density within a window.

For each active site (catalog order):
    usage_count         = placements at the site inside the window
    intensity           = usage_count / max usage_count   (0 when no events)
    percentage_of_total = usage_count / total * 100       (0 when no events)
    last_used           = latest placement at the site inside the window

``total`` counts placements at active sites only, so percentages sum to
100 (within rounding) whenever there is at least one placement, and the
most-used site always has intensity exactly 1.0.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional, Sequence

from site_rotation.models.analytics import HeatmapEntry
from site_rotation.models.placement import PlacementEvent
from site_rotation.models.site import Site, SiteRef
from site_rotation.sites.catalog import active_sites
from site_rotation.utils.time_utils import in_window

logger = logging.getLogger(__name__)


def heatmap(
    catalog: Sequence[Site],
    events: Iterable[PlacementEvent],
    window_start: Optional[datetime] = None,
    window_end: Optional[datetime] = None,
) -> list[HeatmapEntry]:
    """Build one ``HeatmapEntry`` per active site.

    Args:
        catalog: Full site catalog (disabled sites are ignored).
        events: Placement history snapshot.
        window_start: Inclusive lower bound on ``placed_at``; ``None`` = open.
        window_end: Inclusive upper bound on ``placed_at``; ``None`` = open.

    Returns:
        Entries in catalog order.

    Raises:
        InvalidConfigurationError: If the active catalog is empty.
    """
    sites = active_sites(catalog)
    counts: dict[SiteRef, int] = {site.ref: 0 for site in sites}
    last_used: dict[SiteRef, datetime] = {}

    for event in events:
        ref = event.site_ref
        if ref not in counts or not in_window(event.placed_at, window_start, window_end):
            continue
        counts[ref] += 1
        if ref not in last_used or event.placed_at > last_used[ref]:
            last_used[ref] = event.placed_at

    total = sum(counts.values())
    max_count = max(counts.values())

    entries = [
        HeatmapEntry(
            site=site,
            usage_count=counts[site.ref],
            intensity=round(counts[site.ref] / max_count, 4) if max_count else 0.0,
            last_used=last_used.get(site.ref),
            percentage_of_total=(
                round(counts[site.ref] / total * 100.0, 2) if total else 0.0
            ),
        )
        for site in sites
    ]
    logger.debug("Heatmap: %d sites, %d placements, max %d", len(entries), total, max_count)
    return entries


def most_used(entries: Sequence[HeatmapEntry]) -> Optional[HeatmapEntry]:
    """Return the most-used entry (first in catalog order on ties), or ``None``."""
    used = [e for e in entries if e.usage_count > 0]
    if not used:
        return None
    return max(used, key=lambda e: e.usage_count)


def least_used(entries: Sequence[HeatmapEntry]) -> Optional[HeatmapEntry]:
    """Return the least-used entry (first in catalog order on ties), or ``None``."""
    if not entries:
        return None
    return min(entries, key=lambda e: e.usage_count)
