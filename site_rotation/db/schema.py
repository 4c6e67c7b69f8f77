"""
SQLite schema DDL for the local event store.

All statements use ``IF NOT EXISTS`` so ``apply_schema()`` is **idempotent**:
safe to call on an already-initialized database (e.g. after restart or in tests).

Tables
------
  1. custom_sites            user-defined sites (no FKs)
  2. disabled_builtin_sites  built-in locations switched off by the user
  3. placements              placement log; ``site_key`` is a stable
                             ``SiteRef`` key (``builtin:…`` / ``custom:…``)
  4. achievements            earned achievements; one row per type

``placements.site_key`` deliberately has no foreign key: deleting a custom
site must not rewrite history, and the engine simply ignores placements at
sites missing from the catalog.
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

# ── DDL statements ─────────────────────────────────────────────────────────────

_DDL_CUSTOM_SITES = """
CREATE TABLE IF NOT EXISTS custom_sites (
    custom_id       TEXT    PRIMARY KEY,
    name            TEXT    NOT NULL,
    icon_name       TEXT    NOT NULL DEFAULT 'star.fill',
    is_enabled      INTEGER NOT NULL DEFAULT 1,
    created_at      TEXT    NOT NULL
);
"""

_DDL_DISABLED_BUILTIN_SITES = """
CREATE TABLE IF NOT EXISTS disabled_builtin_sites (
    location        TEXT    PRIMARY KEY,
    disabled_at     TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

_DDL_PLACEMENTS = """
CREATE TABLE IF NOT EXISTS placements (
    event_id        TEXT    PRIMARY KEY,
    site_key        TEXT    NOT NULL,
    placed_at       TEXT    NOT NULL,
    note            TEXT,
    profile_id      TEXT,
    created_at      TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
    updated_at      TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
CREATE INDEX IF NOT EXISTS idx_placements_placed_at ON placements (placed_at);
CREATE INDEX IF NOT EXISTS idx_placements_site_key  ON placements (site_key, placed_at);
"""

_DDL_ACHIEVEMENTS = """
CREATE TABLE IF NOT EXISTS achievements (
    achievement_id   TEXT    PRIMARY KEY,
    achievement_type TEXT    NOT NULL UNIQUE,
    earned_at        TEXT    NOT NULL,
    metadata         TEXT
);
"""

_ALL_DDL = [
    _DDL_CUSTOM_SITES,
    _DDL_DISABLED_BUILTIN_SITES,
    _DDL_PLACEMENTS,
    _DDL_ACHIEVEMENTS,
]

ALL_TABLE_NAMES = [
    "custom_sites",
    "disabled_builtin_sites",
    "placements",
    "achievements",
]


def apply_schema(conn: sqlite3.Connection) -> None:
    """Create all tables and indexes.

    Idempotent — safe to call on an already-initialized database.

    Args:
        conn: An open ``sqlite3.Connection``.
    """
    logger.debug("Applying schema to database...")

    for ddl in _ALL_DDL:
        for statement in _split_ddl(ddl):
            conn.execute(statement)

    conn.commit()
    logger.info("Schema applied: %d tables created/verified.", len(ALL_TABLE_NAMES))


def _split_ddl(ddl: str) -> list[str]:
    """Split a multi-statement DDL block on semicolons."""
    return [s.strip() for s in ddl.split(";") if s.strip()]


def get_existing_tables(conn: sqlite3.Connection) -> list[str]:
    """Return table names present in the database, sorted alphabetically."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name;"
    ).fetchall()
    return [row["name"] for row in rows]
