"""
Site Rotation — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Read one consistent snapshot (catalog + placements) from the store.
  4. Hand it to the engine.
  5. Report result to stdout.

Install and run::

    pip install -e .
    site-rotation --help
    site-rotation init-db
    site-rotation log-placement left_arm --note "felt fine"
    site-rotation recommend
    site-rotation score --days 30
    site-rotation export --format parquet
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Optional
from uuid import UUID

import typer

app = typer.Typer(
    name="site-rotation",
    help="Insulin pump site rotation tracker — local-first analytics CLI.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from site_rotation.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from site_rotation.utils.logging import configure_logging
    configure_logging(config.logging)


def _connect(config):
    """Open the configured event store."""
    from site_rotation.db.connection import get_connection

    return get_connection(
        config.database.db_path,
        wal_mode=config.database.wal_mode,
        busy_timeout_ms=config.database.busy_timeout_ms,
    )


def _now(config) -> datetime:
    """Current time in the configured zone, or naive local time."""
    tz = config.calendar.zone_info()
    return datetime.now(tz) if tz else datetime.now()


def _parse_ts_or_exit(value: Optional[str], config) -> Optional[datetime]:
    """Parse a user-supplied ISO timestamp into the same form as ``_now()``."""
    from site_rotation.utils.time_utils import to_zone_form

    if value is None:
        return None
    try:
        return to_zone_form(datetime.fromisoformat(value), config.calendar.zone_info())
    except ValueError:
        typer.echo(f"[ERROR] Invalid timestamp '{value}'. Use ISO format, e.g. 2026-03-01T08:30.", err=True)
        raise typer.Exit(code=1)


def _parse_site_or_exit(key: str):
    from site_rotation.models.site import parse_site_ref

    try:
        return parse_site_ref(key)
    except ValueError:
        typer.echo(
            f"[ERROR] Unknown site '{key}'. Use a built-in location (e.g. left_arm) "
            "or custom:<uuid>.",
            err=True,
        )
        raise typer.Exit(code=1)


def _placeable_site_or_exit(catalog, ref, key: str):
    """Return the catalog entry for ``ref``; exit if missing or disabled."""
    from site_rotation.sites.catalog import site_for_ref

    entry = site_for_ref(catalog, ref)
    if entry is None:
        typer.echo(f"[ERROR] Site '{key}' is not in the catalog.", err=True)
        raise typer.Exit(code=1)
    if not entry.enabled:
        typer.echo(f"[ERROR] Site '{entry.display_name}' is disabled; enable it first.", err=True)
        raise typer.Exit(code=1)
    return entry


def _custom_id_or_exit(key: str, action: str) -> UUID:
    from site_rotation.models.site import CustomSiteRef

    ref = _parse_site_or_exit(key)
    if not isinstance(ref, CustomSiteRef):
        typer.echo(
            f"[ERROR] Built-in sites cannot be {action}; use disable-site instead.",
            err=True,
        )
        raise typer.Exit(code=1)
    return ref.custom_id


def _read_state(config):
    """Read catalog, placements and earned achievements in one transaction."""
    from site_rotation.db.connection import read_snapshot

    with _connect(config) as conn:
        snapshot = read_snapshot(conn, config.calendar.zone_info())
    return snapshot.catalog, snapshot.events, snapshot.earned


def _window_start(days: Optional[int], config) -> Optional[datetime]:
    if days is None:
        return None
    from site_rotation.utils.time_utils import trailing_days_window

    start, _ = trailing_days_window(_now(config), days, config.calendar.zone_info())
    return start


def _engine_error_or_exit(exc: Exception) -> None:
    typer.echo(f"[ERROR] {exc}", err=True)
    raise typer.Exit(code=1)


# ── Setup commands ────────────────────────────────────────────────────────────

@app.command("init-db")
def init_db(
    db_path: Optional[str] = typer.Option(
        None,
        "--db-path",
        help="Override DB path from config (e.g. data/db/test.db).",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Initialize the SQLite database and apply the full schema.

    Safe to run multiple times — all DDL uses IF NOT EXISTS.
    """
    from site_rotation.db.connection import get_connection
    from site_rotation.db.schema import ALL_TABLE_NAMES, apply_schema

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    target_path = db_path or config.database.db_path
    typer.echo(f"Initializing database at: {target_path}")

    with get_connection(
        target_path,
        wal_mode=config.database.wal_mode,
        busy_timeout_ms=config.database.busy_timeout_ms,
    ) as conn:
        apply_schema(conn)

    typer.echo(f"  Tables: {len(ALL_TABLE_NAMES)} created/verified.")
    typer.echo("[OK] Database ready.")


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Database path:     {config.database.db_path}")
    typer.echo(f"  Minimum rest days: {config.rotation.minimum_rest_days}")
    typer.echo(f"  Time zone:         {config.calendar.timezone or '(local)'}")
    typer.echo(f"  Trend window:      {config.analytics.trend_days} days by {config.analytics.trend_group_by}")
    typer.echo(f"  Log level:         {config.logging.level}")
    typer.echo(f"  Debug mode:        {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


# ── Placement commands ────────────────────────────────────────────────────────

@app.command("log-placement")
def log_placement(
    site: str = typer.Argument(..., help="Built-in location (e.g. left_arm) or custom:<uuid>."),
    at: Optional[str] = typer.Option(None, "--at", help="ISO timestamp; defaults to now."),
    note: Optional[str] = typer.Option(None, "--note", help="Optional note."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Record a pump placement and award any achievements it completes."""
    from site_rotation.achievements.awards import award_new_achievements
    from site_rotation.db.connection import read_snapshot
    from site_rotation.db.repositories.achievement_repo import AchievementRepository
    from site_rotation.db.repositories.placement_repo import PlacementRepository
    from site_rotation.models.placement import PlacementEvent
    from site_rotation.sites.catalog import InvalidConfigurationError

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    tz = config.calendar.zone_info()

    ref = _parse_site_or_exit(site)
    placed_at = _parse_ts_or_exit(at, config) or _now(config)

    with _connect(config) as conn:
        before = read_snapshot(conn, tz)
        entry = _placeable_site_or_exit(before.catalog, ref, site)

        event = PlacementEvent(site_ref=ref, placed_at=placed_at, note=note)
        PlacementRepository(conn).insert(event)

        try:
            awarded = award_new_achievements(
                AchievementRepository(conn),
                [*before.events, event],
                before.catalog,
                _now(config),
                config.rotation.minimum_rest_days,
                tz=tz,
            )
        except InvalidConfigurationError as exc:
            _engine_error_or_exit(exc)

    typer.echo(f"  Logged {entry.display_name} at {placed_at.isoformat(timespec='minutes')}")
    typer.echo(f"  Event id: {event.event_id}")
    for achievement in awarded:
        typer.echo(
            f"  Achievement unlocked: {achievement.achievement_type.title} "
            f"(+{achievement.points} points)"
        )
    typer.echo("[OK] Placement recorded.")


@app.command("edit-placement")
def edit_placement(
    event_id: str = typer.Argument(..., help="Placement event id."),
    site: Optional[str] = typer.Option(None, "--site", help="New site key."),
    at: Optional[str] = typer.Option(None, "--at", help="New ISO timestamp."),
    note: Optional[str] = typer.Option(None, "--note", help="New note; pass '' to clear."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Edit a logged placement."""
    from site_rotation.db.repositories.placement_repo import PlacementRepository
    from site_rotation.db.repositories.site_repo import SiteRepository
    from site_rotation.db.schema import apply_schema

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    ref = _parse_site_or_exit(site) if site is not None else None
    placed_at = _parse_ts_or_exit(at, config)

    try:
        with _connect(config) as conn:
            apply_schema(conn)
            if ref is not None:
                _placeable_site_or_exit(SiteRepository(conn).load_catalog(), ref, site)
            updated = PlacementRepository(conn).edit(
                UUID(event_id),
                site_key=ref.key if ref is not None else None,
                placed_at=placed_at,
                note=note,
            )
    except (LookupError, ValueError) as exc:
        _engine_error_or_exit(exc)

    typer.echo(f"  {updated.event_id}: {updated.site_ref.key} at {updated.placed_at.isoformat()}")
    typer.echo("[OK] Placement updated.")


@app.command("delete-placement")
def delete_placement(
    event_id: str = typer.Argument(..., help="Placement event id."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Delete a logged placement."""
    from site_rotation.db.repositories.placement_repo import PlacementRepository

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    try:
        with _connect(config) as conn:
            PlacementRepository(conn).delete(UUID(event_id))
    except (LookupError, ValueError) as exc:
        _engine_error_or_exit(exc)

    typer.echo("[OK] Placement deleted.")


@app.command("history")
def history(
    limit: int = typer.Option(20, "--limit", help="Most recent N placements."),
    since: Optional[str] = typer.Option(None, "--since", help="Only placements at or after this ISO timestamp."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """List the most recent placements, newest first."""
    from site_rotation.db.connection import localize_events
    from site_rotation.db.repositories.placement_repo import PlacementRepository
    from site_rotation.db.repositories.site_repo import SiteRepository
    from site_rotation.db.schema import apply_schema

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    start = _parse_ts_or_exit(since, config)

    with _connect(config) as conn:
        apply_schema(conn)
        catalog = SiteRepository(conn).load_catalog()
        placements = PlacementRepository(conn)
        total = placements.count()
        events = localize_events(placements.list_between(start, None), config.calendar.zone_info())

    names = {s.ref: s.display_name for s in catalog}
    recent = list(reversed(events))[:limit]
    if not recent:
        typer.echo("  (no placements logged yet)" if total == 0 else "  (no placements in range)")
        return
    for e in recent:
        note = f"  -- {e.note}" if e.note else ""
        typer.echo(
            f"  {e.placed_at.isoformat(timespec='minutes')}  "
            f"{names.get(e.site_ref, e.site_ref.key):<26}  {e.event_id}{note}"
        )
    typer.echo(f"  Showing {len(recent)} of {total} placement(s).")


# ── Site catalog commands ─────────────────────────────────────────────────────

@app.command("add-site")
def add_site(
    name: str = typer.Argument(..., help="Display name of the custom site."),
    icon: str = typer.Option("star.fill", "--icon", help="Icon identifier."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Add a custom placement site."""
    from pydantic import ValidationError

    from site_rotation.db.repositories.site_repo import SiteRepository
    from site_rotation.db.schema import apply_schema

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    try:
        with _connect(config) as conn:
            apply_schema(conn)
            site = SiteRepository(conn).add_custom_site(name, icon_name=icon, created_at=_now(config))
    except ValidationError as exc:
        _engine_error_or_exit(exc)

    typer.echo(f"  Added '{site.name}' as {site.ref.key}")
    typer.echo("[OK] Site added.")


@app.command("rename-site")
def rename_site(
    site: str = typer.Argument(..., help="custom:<uuid> of the site to rename."),
    name: str = typer.Argument(..., help="New display name."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Rename a custom site."""
    from site_rotation.db.repositories.site_repo import SiteRepository
    from site_rotation.db.schema import apply_schema

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    custom_id = _custom_id_or_exit(site, "renamed")

    try:
        with _connect(config) as conn:
            apply_schema(conn)
            SiteRepository(conn).rename_custom_site(custom_id, name)
    except (LookupError, ValueError) as exc:
        _engine_error_or_exit(exc)

    typer.echo(f"[OK] {site} renamed to '{name.strip()}'.")


@app.command("delete-site")
def delete_site(
    site: str = typer.Argument(..., help="custom:<uuid> of the site to delete."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Delete a custom site.  Its placements stay in history but no longer count."""
    from site_rotation.db.repositories.site_repo import SiteRepository
    from site_rotation.db.schema import apply_schema
    from site_rotation.sites.catalog import InvalidConfigurationError

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    custom_id = _custom_id_or_exit(site, "deleted")

    try:
        with _connect(config) as conn:
            apply_schema(conn)
            SiteRepository(conn).delete_custom_site(custom_id)
    except (InvalidConfigurationError, LookupError) as exc:
        _engine_error_or_exit(exc)

    typer.echo(f"[OK] {site} deleted.")


def _set_site_enabled(site: str, enabled: bool, config_path: Optional[str]) -> None:
    from site_rotation.db.repositories.site_repo import SiteRepository
    from site_rotation.db.schema import apply_schema
    from site_rotation.models.site import BuiltinSiteRef
    from site_rotation.sites.catalog import InvalidConfigurationError

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    ref = _parse_site_or_exit(site)

    try:
        with _connect(config) as conn:
            apply_schema(conn)
            repo = SiteRepository(conn)
            if isinstance(ref, BuiltinSiteRef):
                if enabled:
                    repo.enable_builtin(ref.location)
                else:
                    repo.disable_builtin(ref.location)
            else:
                repo.set_custom_site_enabled(ref.custom_id, enabled)
    except (InvalidConfigurationError, LookupError) as exc:
        _engine_error_or_exit(exc)

    typer.echo(f"[OK] {ref.key} {'enabled' if enabled else 'disabled'}.")


@app.command("disable-site")
def disable_site(
    site: str = typer.Argument(..., help="Built-in location or custom:<uuid>."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Exclude a site from rotation (history is kept)."""
    _set_site_enabled(site, False, config_path)


@app.command("enable-site")
def enable_site(
    site: str = typer.Argument(..., help="Built-in location or custom:<uuid>."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Bring a disabled site back into rotation."""
    _set_site_enabled(site, True, config_path)


# ── Analytics commands ────────────────────────────────────────────────────────

@app.command("status")
def status(
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Show Unused / Resting / Ready for every active site."""
    from site_rotation.reporting.formatters import format_status_table
    from site_rotation.sites.catalog import InvalidConfigurationError
    from site_rotation.sites.status import classify_catalog

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    catalog, events, _ = _read_state(config)
    rest_days = config.rotation.minimum_rest_days

    try:
        statuses = classify_catalog(
            catalog, events, rest_days, _now(config), config.calendar.zone_info()
        )
    except InvalidConfigurationError as exc:
        _engine_error_or_exit(exc)

    typer.echo(format_status_table(statuses, rest_days))


@app.command("recommend")
def recommend_cmd(
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Recommend the next placement site."""
    from site_rotation.recommendations.selector import recommend
    from site_rotation.reporting.formatters import format_recommendation
    from site_rotation.sites.catalog import InvalidConfigurationError

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    catalog, events, _ = _read_state(config)

    try:
        rec = recommend(
            catalog,
            events,
            config.rotation.minimum_rest_days,
            _now(config),
            config.calendar.zone_info(),
        )
    except InvalidConfigurationError as exc:
        _engine_error_or_exit(exc)

    typer.echo(format_recommendation(rec))


@app.command("score")
def score_cmd(
    days: Optional[int] = typer.Option(None, "--days", min=1, help="Only the last N days (default: all history)."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Show the 0–100 rotation score and its components."""
    from site_rotation.reporting.formatters import format_score
    from site_rotation.scoring.rotation_score import score
    from site_rotation.sites.catalog import InvalidConfigurationError

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    catalog, events, _ = _read_state(config)

    try:
        result = score(
            catalog,
            events,
            config.rotation.minimum_rest_days,
            window_start=_window_start(days, config),
            tz=config.calendar.zone_info(),
        )
    except InvalidConfigurationError as exc:
        _engine_error_or_exit(exc)

    typer.echo(format_score(result))


@app.command("streak")
def streak(
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Show the current and longest consecutive-day logging streaks."""
    from site_rotation.analytics.streaks import current_streak, longest_streak

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    _, events, _ = _read_state(config)
    tz = config.calendar.zone_info()

    typer.echo(f"  Current streak: {current_streak(events, _now(config), tz)} day(s)")
    typer.echo(f"  Longest streak: {longest_streak(events, tz)} day(s)")


@app.command("heatmap")
def heatmap_cmd(
    days: Optional[int] = typer.Option(None, "--days", min=1, help="Only the last N days (default: all history)."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Show per-site usage counts, shares and intensity."""
    from site_rotation.analytics.heatmap import heatmap
    from site_rotation.reporting.formatters import format_heatmap_table
    from site_rotation.sites.catalog import InvalidConfigurationError

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    catalog, events, _ = _read_state(config)

    try:
        entries = heatmap(catalog, events, window_start=_window_start(days, config))
    except InvalidConfigurationError as exc:
        _engine_error_or_exit(exc)

    typer.echo(format_heatmap_table(entries))


@app.command("trend")
def trend_cmd(
    days: Optional[int] = typer.Option(None, "--days", min=1, help="Window length (default: analytics.trend_days)."),
    group_by: Optional[str] = typer.Option(None, "--group-by", help="'day' or 'week'."),
    site: Optional[str] = typer.Option(None, "--site", help="Only this site."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Show a dense day/week placement-count series."""
    from site_rotation.analytics.trends import TrendGrouping, trend
    from site_rotation.reporting.formatters import format_trend
    from site_rotation.sites.catalog import site_for_ref
    from site_rotation.utils.time_utils import trailing_days_window

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    catalog, events, _ = _read_state(config)
    tz = config.calendar.zone_info()

    grouping_value = group_by or config.analytics.trend_group_by
    if grouping_value not in {g.value for g in TrendGrouping}:
        typer.echo(f"[ERROR] --group-by must be 'day' or 'week', got '{grouping_value}'.", err=True)
        raise typer.Exit(code=1)

    selected = None
    if site is not None:
        selected = site_for_ref(catalog, _parse_site_or_exit(site))
        if selected is None:
            typer.echo(f"[ERROR] Site '{site}' is not in the catalog.", err=True)
            raise typer.Exit(code=1)

    start, end = trailing_days_window(_now(config), days or config.analytics.trend_days, tz)
    points = trend(
        events,
        grouping_value,
        start,
        end,
        site=selected,
        tz=tz,
        week_start=config.calendar.week_start,
    )
    title = f"Placements by {grouping_value}" + (f" — {selected.display_name}" if selected else "")
    typer.echo(format_trend(points, title=title))


@app.command("achievements")
def achievements(
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Show progress toward every achievement and total points."""
    from site_rotation.achievements.evaluator import evaluate_all, total_points
    from site_rotation.reporting.formatters import format_achievements_table
    from site_rotation.sites.catalog import InvalidConfigurationError

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    catalog, events, earned = _read_state(config)

    try:
        progress = evaluate_all(
            events,
            catalog,
            _now(config),
            config.rotation.minimum_rest_days,
            earned=earned,
            tz=config.calendar.zone_info(),
        )
    except InvalidConfigurationError as exc:
        _engine_error_or_exit(exc)

    typer.echo(format_achievements_table(progress, total_points(earned)))


# ── Export ────────────────────────────────────────────────────────────────────

@app.command("export")
def export(
    fmt: str = typer.Option("csv", "--format", help="csv, json or parquet."),
    output_dir: Optional[str] = typer.Option(None, "--output-dir", help="Override export.output_dir."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Export placements, heatmap and trend (csv/parquet) or a full snapshot (json).

    \b
    Files are date-stamped, e.g.:
      placements_2026-03-01.csv
      heatmap_2026-03-01.csv
      trend_2026-03-01.csv
      snapshot_2026-03-01.json
    """
    from site_rotation.reporting.export import (
        HEATMAP_COLUMNS,
        PLACEMENT_COLUMNS,
        TREND_COLUMNS,
        export_to_csv,
        export_to_json,
        export_to_parquet,
        flatten_heatmap_for_export,
        flatten_placements_for_export,
        flatten_trend_for_export,
    )
    from site_rotation.reporting.snapshot import build_snapshot, snapshot_to_dict
    from site_rotation.sites.catalog import InvalidConfigurationError

    if fmt not in ("csv", "json", "parquet"):
        typer.echo(f"[ERROR] --format must be csv, json or parquet, got '{fmt}'.", err=True)
        raise typer.Exit(code=1)

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    catalog, events, earned = _read_state(config)
    now = _now(config)

    try:
        snapshot = build_snapshot(
            catalog,
            events,
            config.rotation_config(),
            now,
            tz=config.calendar.zone_info(),
            trend_days=config.analytics.trend_days,
            group_by=config.analytics.trend_group_by,
            week_start=config.calendar.week_start,
            earned=earned,
        )
    except InvalidConfigurationError as exc:
        _engine_error_or_exit(exc)

    out_dir = Path(output_dir or config.export.output_dir)
    stamp = now.date().isoformat()
    written: list[Path] = []

    if fmt == "json":
        written.append(export_to_json(snapshot_to_dict(snapshot), out_dir / f"snapshot_{stamp}.json"))
    else:
        writer = export_to_csv if fmt == "csv" else export_to_parquet
        tables = {
            "placements": (flatten_placements_for_export(events, catalog), PLACEMENT_COLUMNS),
            "heatmap": (flatten_heatmap_for_export(snapshot.heatmap), HEATMAP_COLUMNS),
            "trend": (flatten_trend_for_export(snapshot.trend), TREND_COLUMNS),
        }
        for name, (rows, columns) in tables.items():
            written.append(writer(rows, out_dir / f"{name}_{stamp}.{fmt}", fieldnames=columns))

    for path in written:
        typer.echo(f"  Wrote {path}")
    typer.echo(f"[OK] Exported {len(written)} file(s).")


if __name__ == "__main__":
    app()
