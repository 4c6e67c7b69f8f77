"""
Derived analytics records produced by the engine.

None of these are persisted by the engine: they are pure functions of
``(events, catalog, config, now)`` and are recomputed on demand.  All are
frozen so callers can memoize them safely.

Records
-------
SiteStatusResult    : per-site readiness from the classifier.
Recommendation      : the single best next site, with reason.
RotationScore       : 0–100 compliance score with its two 0–50 components.
HeatmapEntry        : per-site usage density for the body heatmap.
TrendPoint          : one bucket of a dense placement-count time series.
AchievementProgress : progress (0–1) toward one achievement type.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from site_rotation.models.site import Site
from site_rotation.taxonomy.achievement_taxonomy import AchievementType
from site_rotation.taxonomy.site_taxonomy import SiteStatus


class SiteStatusResult(BaseModel):
    """Readiness of one site.

    Attributes:
        site: The classified site.
        status: ``unused``, ``resting`` or ``ready``.
        days_since_last_use: Calendar days since the last placement;
            ``None`` exactly when ``status`` is ``unused``.
    """

    model_config = ConfigDict(frozen=True)

    site: Site
    status: SiteStatus
    days_since_last_use: Optional[int] = None

    @model_validator(mode="after")
    def validate_days(self) -> "SiteStatusResult":
        if (self.status == SiteStatus.UNUSED) != (self.days_since_last_use is None):
            raise ValueError(
                "days_since_last_use must be None exactly when status is 'unused'."
            )
        return self


class Recommendation(BaseModel):
    """The recommended next placement site."""

    model_config = ConfigDict(frozen=True)

    site: Site
    days_since_last_use: Optional[int] = None
    reason: str


class RotationScore(BaseModel):
    """Rotation compliance score.

    Attributes:
        total: Rounded sum of both components, clamped to 0–100.
        distribution_component: 0–50; evenness of usage across active sites.
        rest_compliance_component: 0–50; share of same-site reuses that
            respected the minimum rest period.
        explanation: Human-readable summary for the score band.
    """

    model_config = ConfigDict(frozen=True)

    total: int = Field(ge=0, le=100)
    distribution_component: float = Field(ge=0.0, le=50.0)
    rest_compliance_component: float = Field(ge=0.0, le=50.0)
    explanation: str


class HeatmapEntry(BaseModel):
    """Usage density for a single site within a window.

    Attributes:
        site: The site this row describes.
        usage_count: Placements at this site in the window.
        intensity: ``usage_count`` relative to the most-used site (0–1).
        last_used: Most recent placement at this site in the window.
        percentage_of_total: Share of all placements in the window (0–100).
    """

    model_config = ConfigDict(frozen=True)

    site: Site
    usage_count: int = Field(ge=0)
    intensity: float = Field(ge=0.0, le=1.0)
    last_used: Optional[datetime] = None
    percentage_of_total: float = Field(ge=0.0, le=100.0)


class TrendPoint(BaseModel):
    """Placement count for one day or week bucket.

    ``bucket_start`` is the local calendar date the bucket begins on.
    ``site`` is set when the series was filtered to a single site.
    """

    model_config = ConfigDict(frozen=True)

    bucket_start: date
    count: int = Field(ge=0)
    site: Optional[Site] = None


class AchievementProgress(BaseModel):
    """Progress toward one achievement.

    ``earned`` reflects the caller's persisted state, not ``progress`` alone:
    a type already awarded stays earned even if its metric later drops
    (e.g. a broken streak).
    """

    model_config = ConfigDict(frozen=True)

    achievement_type: AchievementType
    progress: float = Field(ge=0.0, le=1.0)
    earned: bool = False

    @property
    def is_complete(self) -> bool:
        return self.progress >= 1.0
