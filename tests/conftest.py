"""
Shared pytest fixtures for the site rotation test suite.

Provides:
  - ``in_memory_db``: A fresh in-memory SQLite connection with the full
    schema applied. Created anew for each test that requests it.
  - ``now``: A fixed naive evaluation instant (2026-03-01 12:00 local).
  - ``catalog``: The eight built-in sites, all enabled.
  - ``place``: Factory for placement events at built-in locations.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta
from typing import Callable, Generator

import pytest

from site_rotation.db.schema import apply_schema
from site_rotation.models.placement import PlacementEvent
from site_rotation.models.site import Site
from site_rotation.sites.catalog import build_catalog
from site_rotation.taxonomy.site_taxonomy import BodyLocation

NOW = datetime(2026, 3, 1, 12, 0)


# ── Database fixture ──────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with the full schema applied.

    Foreign key enforcement is ON. Connection is closed after the test.
    """
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    apply_schema(conn)
    yield conn
    conn.close()


# ── Engine input fixtures ─────────────────────────────────────────────────────

@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def catalog() -> list[Site]:
    """All eight built-in sites, enabled, in canonical order."""
    return build_catalog()


@pytest.fixture
def place() -> Callable[..., PlacementEvent]:
    """Return ``place(location, days_ago=0, hour=None)`` relative to ``NOW``."""

    def _place(location: BodyLocation, days_ago: int = 0, hour: int | None = None) -> PlacementEvent:
        ts = NOW - timedelta(days=days_ago)
        if hour is not None:
            ts = ts.replace(hour=hour)
        return PlacementEvent.at_location(location, ts)

    return _place
