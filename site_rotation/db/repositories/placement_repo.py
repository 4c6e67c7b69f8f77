"""
Repository for placement events — insert, edit, delete and history reads.

Timestamps are stored as ISO-8601 strings exactly as given (naive or aware)
and parsed back with ``datetime.fromisoformat``.  Window filtering is done
on parsed datetimes, not on strings, so mixed UTC offsets compare correctly.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from site_rotation.db.repositories.base import BaseRepository
from site_rotation.models.placement import PlacementEvent
from site_rotation.models.site import parse_site_ref
from site_rotation.utils.time_utils import in_window

logger = logging.getLogger(__name__)

_COLUMNS = "event_id, site_key, placed_at, note, profile_id"


class PlacementRepository(BaseRepository):
    """Read/write access to the ``placements`` table."""

    def insert(self, event: PlacementEvent) -> UUID:
        """Persist a new placement and return its ``event_id``.

        Raises:
            sqlite3.IntegrityError: If a placement with the same id exists.
        """
        self.execute(
            f"""
            INSERT INTO placements ({_COLUMNS})
            VALUES (?, ?, ?, ?, ?);
            """,
            (
                str(event.event_id),
                event.site_ref.key,
                event.placed_at.isoformat(),
                event.note,
                str(event.profile_id) if event.profile_id else None,
            ),
        )
        logger.info(
            "Placement recorded",
            extra={"event_id": str(event.event_id), "site_key": event.site_ref.key},
        )
        return event.event_id

    def update(self, event: PlacementEvent) -> None:
        """Replace the stored row for ``event.event_id`` with the edited record.

        Raises:
            LookupError: If no placement has that id.
        """
        self.execute_one(
            """
            UPDATE placements
               SET site_key   = ?,
                   placed_at  = ?,
                   note       = ?,
                   updated_at = strftime('%Y-%m-%dT%H:%M:%SZ', 'now')
             WHERE event_id = ?;
            """,
            (
                event.site_ref.key,
                event.placed_at.isoformat(),
                event.note,
                str(event.event_id),
            ),
            what=f"Placement {event.event_id}",
        )
        logger.info(
            "Placement edited",
            extra={"event_id": str(event.event_id), "site_key": event.site_ref.key},
        )

    def edit(
        self,
        event_id: UUID,
        site_key: Optional[str] = None,
        placed_at: Optional[datetime] = None,
        note: Optional[str] = None,
    ) -> PlacementEvent:
        """Apply a partial edit and return the effective record.

        Raises:
            LookupError: If no placement has that id.
            ValueError: If ``site_key`` is malformed.
        """
        current = self.get_by_id(event_id)
        if current is None:
            raise LookupError(f"Placement {event_id} not found.")
        updated = current.edited(
            site_ref=parse_site_ref(site_key) if site_key else None,
            placed_at=placed_at,
            note=note,
        )
        self.update(updated)
        return updated

    def delete(self, event_id: UUID) -> None:
        """Remove a placement.

        Raises:
            LookupError: If no placement has that id.
        """
        self.execute_one(
            "DELETE FROM placements WHERE event_id = ?;",
            (str(event_id),),
            what=f"Placement {event_id}",
        )
        logger.info("Placement deleted", extra={"event_id": str(event_id)})

    def get_by_id(self, event_id: UUID) -> Optional[PlacementEvent]:
        row = self.fetchone(
            f"SELECT {_COLUMNS} FROM placements WHERE event_id = ?;",
            (str(event_id),),
        )
        return _row_to_event(row) if row else None

    def list_all(self, profile_id: Optional[UUID] = None) -> list[PlacementEvent]:
        """Return every placement ordered by ``placed_at`` ascending.

        Args:
            profile_id: When given, only that profile's placements.
        """
        if profile_id is None:
            rows = self.fetchall(
                f"SELECT {_COLUMNS} FROM placements ORDER BY placed_at, event_id;"
            )
        else:
            rows = self.fetchall(
                f"""
                SELECT {_COLUMNS} FROM placements
                 WHERE profile_id = ?
                 ORDER BY placed_at, event_id;
                """,
                (str(profile_id),),
            )
        return [_row_to_event(r) for r in rows]

    def list_between(
        self,
        start: Optional[datetime],
        end: Optional[datetime],
        profile_id: Optional[UUID] = None,
    ) -> list[PlacementEvent]:
        """Placements with ``start <= placed_at <= end``; ``None`` leaves a side open."""
        return [
            e for e in self.list_all(profile_id)
            if in_window(e.placed_at, start, end)
        ]

    def count(self) -> int:
        row = self.fetchone("SELECT COUNT(*) AS n FROM placements;")
        return int(row["n"]) if row else 0


def _row_to_event(row) -> PlacementEvent:
    """Convert a ``sqlite3.Row`` to a ``PlacementEvent`` model."""
    return PlacementEvent(
        event_id=UUID(row["event_id"]),
        site_ref=parse_site_ref(row["site_key"]),
        placed_at=datetime.fromisoformat(row["placed_at"]),
        note=row["note"],
        profile_id=UUID(row["profile_id"]) if row["profile_id"] else None,
    )
