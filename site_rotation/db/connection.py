"""
Opening the local event store and reading one consistent snapshot of it.

The engine never touches the database.  Callers open the store with
``get_connection()``, take a ``StoreSnapshot`` with ``read_snapshot()`` and
hand its catalog, placements and earned achievements to the engine.

Timestamps come back from the store in whatever form they were written:
naive local wall time while no time zone was configured, aware once one
was.  ``read_snapshot(conn, tz)`` brings every placement into the form the
caller's ``now`` uses (see ``to_zone_form``), so a history that spans a
time-zone change still compares cleanly.

Usage::

    from site_rotation.db.connection import get_connection, read_snapshot

    with get_connection("data/db/site_rotation.db") as conn:
        snapshot = read_snapshot(conn, tz)
    recommend(snapshot.catalog, snapshot.events, 18, now, tz)
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import tzinfo
from pathlib import Path
from typing import Generator, Optional

from site_rotation.db.repositories.achievement_repo import AchievementRepository
from site_rotation.db.repositories.placement_repo import PlacementRepository
from site_rotation.db.repositories.site_repo import SiteRepository
from site_rotation.db.schema import apply_schema
from site_rotation.models.placement import PlacementEvent
from site_rotation.models.site import Site
from site_rotation.taxonomy.achievement_taxonomy import AchievementType
from site_rotation.utils.time_utils import to_zone_form

logger = logging.getLogger(__name__)


@contextmanager
def get_connection(
    db_path: str,
    wal_mode: bool = True,
    busy_timeout_ms: int = 5000,
) -> Generator[sqlite3.Connection, None, None]:
    """Open the event store; commit on clean exit, roll back on exception.

    Parent directories of ``db_path`` are created.  WAL mode lets a widget
    or second process read while the CLI writes; ``busy_timeout_ms`` bounds
    how long a write waits on that reader.  Use ``":memory:"`` in tests.
    """
    on_disk = db_path != ":memory:"
    if on_disk:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path, timeout=busy_timeout_ms / 1000)
    conn.row_factory = sqlite3.Row
    try:
        conn.execute(f"PRAGMA busy_timeout = {int(busy_timeout_ms)};")
        if wal_mode and on_disk:
            conn.execute("PRAGMA journal_mode = WAL;")
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@dataclass(frozen=True)
class StoreSnapshot:
    """Everything the engine reads, taken inside one transaction."""

    catalog: list[Site]
    events: list[PlacementEvent]
    earned: set[AchievementType] = field(default_factory=set)


def localize_events(
    events: list[PlacementEvent],
    tz: Optional[tzinfo] = None,
) -> list[PlacementEvent]:
    """Return ``events`` with ``placed_at`` in one form, oldest first."""
    localized = [
        e.model_copy(update={"placed_at": to_zone_form(e.placed_at, tz)})
        for e in events
    ]
    return sorted(localized, key=lambda e: (e.placed_at, str(e.event_id)))


def read_snapshot(conn: sqlite3.Connection, tz: Optional[tzinfo] = None) -> StoreSnapshot:
    """Read catalog, placements and earned achievements from ``conn``.

    Applies the schema first, so a fresh database reads as empty history.

    Args:
        conn: Open store connection.
        tz: Configured time zone, or ``None`` for naive local time.
    """
    apply_schema(conn)
    snapshot = StoreSnapshot(
        catalog=SiteRepository(conn).load_catalog(),
        events=localize_events(PlacementRepository(conn).list_all(), tz),
        earned=AchievementRepository(conn).earned_types(),
    )
    logger.debug(
        "Read snapshot: %d sites, %d placements, %d achievements",
        len(snapshot.catalog), len(snapshot.events), len(snapshot.earned),
    )
    return snapshot
