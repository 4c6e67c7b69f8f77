"""
Site taxonomy for pump placement tracking.

Three enums describe every placement site and its derived readiness:
  - ``BodyLocation`` — the built-in body sites, in canonical catalog order.
  - ``SiteKind``     — built-in location vs. user-defined custom site.
  - ``SiteStatus``   — readiness of a site derived from its rest period.

Declaration order of ``BodyLocation`` is significant: it is the first-level
tie-break whenever two sites rank equally (recommendations, heatmap rows).

Usage example::

    from site_rotation.taxonomy.site_taxonomy import BodyLocation, SiteStatus

    location = BodyLocation.LEFT_THIGH
    location.display_name   # "Left Thigh"

This module has NO imports from any other ``site_rotation`` package.
"""

from __future__ import annotations

from enum import StrEnum


class BodyLocation(StrEnum):
    """Built-in body locations approved for pump placement."""

    LEFT_ARM = "left_arm"
    """Back of the left upper arm."""

    RIGHT_ARM = "right_arm"
    """Back of the right upper arm."""

    ABDOMEN_LEFT = "abdomen_left"
    """Left side of the abdomen, away from the navel."""

    ABDOMEN_RIGHT = "abdomen_right"
    """Right side of the abdomen, away from the navel."""

    LOWER_ABDOMEN = "lower_abdomen"
    """Below the navel."""

    LEFT_THIGH = "left_thigh"
    """Outer front of the left thigh."""

    RIGHT_THIGH = "right_thigh"
    """Outer front of the right thigh."""

    LOWER_BACK = "lower_back"
    """Upper buttock / lower back area."""

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES: dict[BodyLocation, str] = {
    BodyLocation.LEFT_ARM:      "Left Arm (Back)",
    BodyLocation.RIGHT_ARM:     "Right Arm (Back)",
    BodyLocation.ABDOMEN_LEFT:  "Abdomen (Left)",
    BodyLocation.ABDOMEN_RIGHT: "Abdomen (Right)",
    BodyLocation.LOWER_ABDOMEN: "Lower Abdomen",
    BodyLocation.LEFT_THIGH:    "Left Thigh",
    BodyLocation.RIGHT_THIGH:   "Right Thigh",
    BodyLocation.LOWER_BACK:    "Lower Back",
}


class SiteKind(StrEnum):
    """Where a site definition comes from."""

    BUILTIN = "builtin"
    """One of the fixed ``BodyLocation`` members."""

    CUSTOM = "custom"
    """User-created site, identified by UUID."""


class SiteStatus(StrEnum):
    """Readiness of a site, derived from days since its last use."""

    UNUSED = "unused"
    """No placement has ever been logged at this site."""

    RESTING = "resting"
    """Used within the minimum rest period; not yet eligible for reuse."""

    READY = "ready"
    """Rest period satisfied (inclusive); eligible for the next placement."""
