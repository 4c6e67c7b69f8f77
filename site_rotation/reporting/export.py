"""
Export helpers for spreadsheets, BI tools and manual analysis.

All functions write to disk and return the written ``Path``.
They accept generic ``list[dict]`` data to stay decoupled from
specific engine outputs.

CSV and Parquet exports are flat (no nested dicts) so they load directly in
Excel, pandas or a BI tool without pre-processing.  The ``flatten_*``
adapters turn engine records into such rows.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Iterable, Sequence

import pyarrow as pa
import pyarrow.parquet as pq

from site_rotation.models.analytics import HeatmapEntry, TrendPoint
from site_rotation.models.placement import PlacementEvent
from site_rotation.models.site import Site

logger = logging.getLogger(__name__)

PLACEMENT_COLUMNS = ["event_id", "site_id", "site_name", "placed_at", "note"]
HEATMAP_COLUMNS = [
    "site_id", "site_name", "site_kind", "usage_count",
    "intensity", "percentage_of_total", "last_used",
]
TREND_COLUMNS = ["bucket_start", "site_id", "count"]


def export_to_csv(
    records: list[dict],
    path: Path,
    fieldnames: list[str] | None = None,
) -> Path:
    """Write ``records`` to a UTF-8 CSV file.

    Args:
        records:    List of row dicts.
        path:       Destination file path (parent dirs created if missing).
        fieldnames: Column order.  If None, uses the keys of the first record.

    Returns:
        ``path`` as written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if not records:
        path.write_text("", encoding="utf-8")
        return path
    cols = fieldnames or list(records[0].keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(records)
    logger.info("Exported %d rows to %s", len(records), path)
    return path


def export_to_json(
    data: dict | list,
    path: Path,
) -> Path:
    """Write ``data`` to a pretty-printed JSON file (non-JSON types via ``str``)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
    logger.info("Exported JSON to %s", path)
    return path


def export_to_parquet(
    records: list[dict],
    path: Path,
    fieldnames: list[str] | None = None,
) -> Path:
    """Write flat ``records`` to a Snappy-compressed Parquet file.

    Column types are inferred by ``pyarrow`` from the row values.  An empty
    record list writes a zero-row table whose string columns are
    ``fieldnames``.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if records:
        table = pa.Table.from_pylist(records)
        if fieldnames:
            table = table.select(fieldnames)
    else:
        table = pa.table({col: pa.array([], type=pa.string()) for col in fieldnames or []})
    pq.write_table(table, str(path), compression="snappy")
    logger.info("Exported %d rows to %s", len(records), path)
    return path


# ── Flatten adapters ──────────────────────────────────────────────────────────


def flatten_heatmap_for_export(entries: Sequence[HeatmapEntry]) -> list[dict]:
    """One row per site: ``site_id``, ``site_name``, ``site_kind``,
    ``usage_count``, ``intensity``, ``percentage_of_total``, ``last_used``.
    """
    return [
        {
            "site_id":             e.site.id,
            "site_name":           e.site.display_name,
            "site_kind":           e.site.kind.value,
            "usage_count":         e.usage_count,
            "intensity":           e.intensity,
            "percentage_of_total": e.percentage_of_total,
            "last_used":           e.last_used.isoformat() if e.last_used else None,
        }
        for e in entries
    ]


def flatten_trend_for_export(points: Sequence[TrendPoint]) -> list[dict]:
    """One row per bucket; ``site_id`` is empty for all-site series."""
    return [
        {
            "bucket_start": p.bucket_start.isoformat(),
            "site_id":      p.site.id if p.site else "",
            "count":        p.count,
        }
        for p in points
    ]


def flatten_placements_for_export(
    events: Iterable[PlacementEvent],
    catalog: Sequence[Site],
) -> list[dict]:
    """One row per placement with the site's display name resolved.

    Placements at sites no longer in the catalog keep their key as the name.
    """
    names = {site.ref: site.display_name for site in catalog}
    return [
        {
            "event_id":  str(e.event_id),
            "site_id":   e.site_ref.key,
            "site_name": names.get(e.site_ref, e.site_ref.key),
            "placed_at": e.placed_at.isoformat(),
            "note":      e.note or "",
        }
        for e in events
    ]
