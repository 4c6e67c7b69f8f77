"""
Site catalog resolution.

The catalog is the ordered list of every site the user could place at:
built-in ``BodyLocation`` members in declaration order, followed by custom
sites ordered by creation time (ties by name).  That order is the
deterministic tie-break used everywhere the engine must choose between
equally-ranked sites.

The **active** catalog is the enabled subset.  It must never be empty when
the engine recommends or scores; an empty active catalog (or a non-positive
rest period) is a caller/data-integrity error and raises
``InvalidConfigurationError`` immediately.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from site_rotation.models.site import CustomSite, Site, SiteRef
from site_rotation.taxonomy.site_taxonomy import BodyLocation

logger = logging.getLogger(__name__)


# ── Custom exceptions ─────────────────────────────────────────────────────────


class InvalidConfigurationError(ValueError):
    """Raised when the engine is called with an unusable configuration.

    Two causes: ``minimum_rest_days < 1``, or an active catalog with no
    enabled sites.  Neither is recoverable by the engine; callers must fix
    their input rather than retry.
    """


def require_rest_days(minimum_rest_days: int) -> int:
    """Validate the rest period and return it unchanged.

    Raises:
        InvalidConfigurationError: If ``minimum_rest_days < 1``.
    """
    if minimum_rest_days < 1:
        raise InvalidConfigurationError(
            f"minimum_rest_days must be >= 1, got {minimum_rest_days}."
        )
    return minimum_rest_days


# ── Catalog construction ──────────────────────────────────────────────────────


def build_catalog(
    custom_sites: Iterable[CustomSite] = (),
    disabled_locations: Iterable[BodyLocation] = (),
) -> list[Site]:
    """Resolve the full site catalog in canonical order.

    Args:
        custom_sites: User-defined sites (enabled or not).
        disabled_locations: Built-in locations the user has switched off.

    Returns:
        Built-in sites in ``BodyLocation`` order, then custom sites by
        ``created_at`` then name.  Disabled sites are included with
        ``enabled=False``.
    """
    disabled = set(disabled_locations)
    catalog = [Site.builtin(loc, enabled=loc not in disabled) for loc in BodyLocation]
    ordered_custom = sorted(custom_sites, key=lambda cs: (cs.created_at.timestamp(), cs.name))
    catalog.extend(cs.to_site() for cs in ordered_custom)
    return catalog


def active_sites(catalog: Iterable[Site]) -> list[Site]:
    """Return the enabled sites in catalog order.

    Raises:
        InvalidConfigurationError: If no site is enabled.
    """
    catalog = list(catalog)
    active = [site for site in catalog if site.enabled]
    logger.debug("Active catalog: %d of %d sites enabled", len(active), len(catalog))
    if not active:
        raise InvalidConfigurationError(
            "The active site catalog is empty; at least one site must be enabled."
        )
    return active


def catalog_position(catalog: Iterable[Site]) -> dict[SiteRef, int]:
    """Map each site ref to its index in catalog order (tie-break key)."""
    return {site.ref: idx for idx, site in enumerate(catalog)}


def site_for_ref(catalog: Iterable[Site], ref: SiteRef) -> Optional[Site]:
    """Return the catalog entry for ``ref``, or ``None`` if it is unknown."""
    for site in catalog:
        if site.ref == ref:
            return site
    return None
