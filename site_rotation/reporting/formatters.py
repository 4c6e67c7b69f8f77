"""
ASCII terminal formatters for CLI reporting commands.

All formatters accept engine records and return plain multi-line strings
suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).
"""

from __future__ import annotations

from typing import Optional, Sequence

from site_rotation.models.analytics import (
    AchievementProgress,
    HeatmapEntry,
    Recommendation,
    RotationScore,
    SiteStatusResult,
    TrendPoint,
)
from site_rotation.scoring.rotation_score import score_band
from site_rotation.sites.status import describe_status

_BAR_WIDTH = 20


def _bar(fraction: float, width: int = _BAR_WIDTH) -> str:
    filled = int(round(max(0.0, min(1.0, fraction)) * width))
    return "#" * filled + "." * (width - filled)


# ── Site status ───────────────────────────────────────────────────────────────


def format_status_table(
    statuses: Sequence[SiteStatusResult],
    minimum_rest_days: int,
) -> str:
    """Format per-site readiness as an ASCII table::

        Site                      Status    Days  Detail
        ------------------------------------------------------------
        Left Arm (Back)           ready       21  Ready (21d rest)
        Abdomen (Right)           unused       -  Available
    """
    lines: list[str] = []
    lines.append("")
    lines.append(f"=== Site Status (minimum rest {minimum_rest_days} days) ===")
    header = f"  {'Site':<26}  {'Status':<8}  {'Days':>4}  Detail"
    lines.append(header)
    lines.append("  " + "-" * 60)
    for s in statuses:
        days = "-" if s.days_since_last_use is None else str(s.days_since_last_use)
        lines.append(
            f"  {s.site.display_name[:26]:<26}  {s.status.value:<8}  {days:>4}  "
            f"{describe_status(s, minimum_rest_days)}"
        )
    return "\n".join(lines)


def format_recommendation(rec: Optional[Recommendation]) -> str:
    if rec is None:
        return "  All sites are resting -- no site is ready yet."
    days = "" if rec.days_since_last_use is None else f" ({rec.days_since_last_use} days rested)"
    return f"  Next site: {rec.site.display_name}{days}\n  Reason:    {rec.reason}"


# ── Score ─────────────────────────────────────────────────────────────────────


def format_score(result: RotationScore) -> str:
    """Format the rotation score with both components and the band."""
    lines = [
        "",
        "=== Rotation Score ===",
        f"  Total:           {result.total:>3} / 100  [{score_band(result.total)}]",
        f"  Distribution:    {result.distribution_component:>6.2f} / 50  "
        f"{_bar(result.distribution_component / 50.0)}",
        f"  Rest compliance: {result.rest_compliance_component:>6.2f} / 50  "
        f"{_bar(result.rest_compliance_component / 50.0)}",
        "",
        f"  {result.explanation}",
    ]
    return "\n".join(lines)


# ── Heatmap / trend ───────────────────────────────────────────────────────────


def format_heatmap_table(entries: Sequence[HeatmapEntry]) -> str:
    lines: list[str] = ["", "=== Site Usage Heatmap ==="]
    header = f"  {'Site':<26}  {'Count':>5}  {'Share':>7}  Intensity"
    lines.append(header)
    lines.append("  " + "-" * 66)
    for e in entries:
        lines.append(
            f"  {e.site.display_name[:26]:<26}  {e.usage_count:>5}  "
            f"{e.percentage_of_total:>6.2f}%  {_bar(e.intensity)}"
        )
    return "\n".join(lines)


def format_trend(points: Sequence[TrendPoint], title: str = "Placement Trend") -> str:
    """Format a trend series as a horizontal bar chart, one line per bucket."""
    lines: list[str] = ["", f"=== {title} ==="]
    peak = max((p.count for p in points), default=0)
    for p in points:
        fraction = p.count / peak if peak else 0.0
        lines.append(f"  {p.bucket_start.isoformat()}  {p.count:>3}  {_bar(fraction)}")
    return "\n".join(lines)


# ── Achievements ──────────────────────────────────────────────────────────────


def format_achievements_table(
    progress: Sequence[AchievementProgress],
    total_points: int,
) -> str:
    lines: list[str] = ["", "=== Achievements ==="]
    header = f"  {'Achievement':<22}  {'Tier':<8}  {'Pts':>3}  {'Progress':>8}  State"
    lines.append(header)
    lines.append("  " + "-" * 60)
    for p in progress:
        atype = p.achievement_type
        state = "earned" if p.earned else ("complete" if p.is_complete else "")
        lines.append(
            f"  {atype.title[:22]:<22}  {atype.tier.value:<8}  {atype.points:>3}  "
            f"{p.progress:>8.0%}  {state}"
        )
    lines.append("")
    lines.append(f"  Total points: {total_points}")
    return "\n".join(lines)
