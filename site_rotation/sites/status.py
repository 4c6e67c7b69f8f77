"""
Site status classification: how long has each site rested?

Rules
-----
    1. UNUSED  : no placement has ever referenced the site.
    2. READY   : calendar days since last use >= minimum_rest_days
                 (inclusive — the boundary day itself is ready).
    3. RESTING : everything else.

Days are counted between local calendar dates, not elapsed hours: a site
used at 23:30 is one day old at 00:30 the next morning, and a site used
30 hours ago may be one or two days old depending on where midnight falls.
"""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Iterable, Optional, Sequence

from site_rotation.models.analytics import SiteStatusResult
from site_rotation.models.placement import PlacementEvent
from site_rotation.models.site import Site, SiteRef
from site_rotation.sites.catalog import active_sites, require_rest_days
from site_rotation.taxonomy.site_taxonomy import SiteStatus
from site_rotation.utils.time_utils import calendar_days_between

logger = logging.getLogger(__name__)


def last_used_by_site(events: Iterable[PlacementEvent]) -> dict[SiteRef, datetime]:
    """Return the most recent ``placed_at`` for every referenced site."""
    last_used: dict[SiteRef, datetime] = {}
    for event in events:
        current = last_used.get(event.site_ref)
        if current is None or event.placed_at > current:
            last_used[event.site_ref] = event.placed_at
    return last_used


def status_from_last_use(
    site: Site,
    last_used: Optional[datetime],
    minimum_rest_days: int,
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> SiteStatusResult:
    """Classify ``site`` given the timestamp of its most recent use."""
    if last_used is None:
        return SiteStatusResult(site=site, status=SiteStatus.UNUSED)

    days = calendar_days_between(last_used, now, tz)
    status = SiteStatus.READY if days >= minimum_rest_days else SiteStatus.RESTING
    return SiteStatusResult(site=site, status=status, days_since_last_use=days)


def classify(
    site: Site,
    events: Iterable[PlacementEvent],
    minimum_rest_days: int,
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> SiteStatusResult:
    """Classify one site from the placement history.

    Args:
        site: The site to classify.
        events: Placement history (any order).
        minimum_rest_days: Rest period; the threshold is inclusive.
        now: Evaluation instant.
        tz: Local time zone for calendar-day boundaries.

    Returns:
        ``SiteStatusResult`` with status and days since last use.

    Raises:
        InvalidConfigurationError: If ``minimum_rest_days < 1``.
    """
    require_rest_days(minimum_rest_days)
    matching = [e.placed_at for e in events if e.site_ref == site.ref]
    last = max(matching) if matching else None
    return status_from_last_use(site, last, minimum_rest_days, now, tz)


def classify_catalog(
    catalog: Sequence[Site],
    events: Iterable[PlacementEvent],
    minimum_rest_days: int,
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> list[SiteStatusResult]:
    """Classify every active site, in catalog order.

    Raises:
        InvalidConfigurationError: If ``minimum_rest_days < 1`` or the
            active catalog is empty.
    """
    require_rest_days(minimum_rest_days)
    sites = active_sites(catalog)
    last_used = last_used_by_site(events)

    results = [
        status_from_last_use(site, last_used.get(site.ref), minimum_rest_days, now, tz)
        for site in sites
    ]
    logger.debug(
        "Classified %d sites: %d unused, %d resting, %d ready",
        len(results),
        sum(r.status == SiteStatus.UNUSED for r in results),
        sum(r.status == SiteStatus.RESTING for r in results),
        sum(r.status == SiteStatus.READY for r in results),
    )
    return results


def rest_days_remaining(result: SiteStatusResult, minimum_rest_days: int) -> int:
    """Days until a resting site becomes ready; 0 for unused/ready sites."""
    if result.days_since_last_use is None:
        return 0
    return max(0, minimum_rest_days - result.days_since_last_use)


def describe_status(result: SiteStatusResult, minimum_rest_days: int) -> str:
    """Short status wording for list and widget surfaces.

    Returns one of ``"Available"``, ``"Used today"``, ``"Used yesterday"``,
    ``"Rest N more days"`` or ``"Ready (Nd rest)"``.
    """
    days = result.days_since_last_use
    if days is None:
        return "Available"
    if result.status == SiteStatus.READY:
        return f"Ready ({days}d rest)"
    if days <= 0:
        return "Used today"
    if days == 1:
        return "Used yesterday"
    remaining = rest_days_remaining(result, minimum_rest_days)
    return f"Rest {remaining} more day{'s' if remaining != 1 else ''}"
