"""
Repository for earned achievements.

``achievements.achievement_type`` is UNIQUE and ``award()`` uses
``INSERT OR IGNORE``, so awarding the same type twice is a no-op and the
original ``earned_at`` is preserved.
"""

from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from site_rotation.db.repositories.base import BaseRepository
from site_rotation.models.achievement import Achievement
from site_rotation.taxonomy.achievement_taxonomy import AchievementType

logger = logging.getLogger(__name__)


class AchievementRepository(BaseRepository):
    """Read/write access to the ``achievements`` table."""

    def award(self, achievement: Achievement) -> bool:
        """Persist an earned achievement.

        Returns:
            ``True`` if a row was inserted, ``False`` if the type was
            already earned.
        """
        cursor = self.execute(
            """
            INSERT OR IGNORE INTO achievements (
                achievement_id, achievement_type, earned_at, metadata
            ) VALUES (?, ?, ?, ?);
            """,
            (
                str(achievement.achievement_id),
                achievement.achievement_type.value,
                achievement.earned_at.isoformat(),
                achievement.metadata,
            ),
        )
        inserted = cursor.rowcount == 1
        if inserted:
            logger.info(
                "Achievement earned: %s (+%d points)",
                achievement.achievement_type.title,
                achievement.points,
                extra={"achievement_type": achievement.achievement_type.value},
            )
        return inserted

    def earned_types(self) -> set[AchievementType]:
        rows = self.fetchall("SELECT achievement_type FROM achievements;")
        return {AchievementType(r["achievement_type"]) for r in rows}

    def list_all(self) -> list[Achievement]:
        """Earned achievements, oldest first."""
        rows = self.fetchall(
            "SELECT * FROM achievements ORDER BY earned_at, achievement_type;"
        )
        return [_row_to_achievement(r) for r in rows]

    def total_points(self) -> int:
        return sum(a.points for a in self.list_all())


def _row_to_achievement(row) -> Achievement:
    """Convert a ``sqlite3.Row`` to an ``Achievement`` model."""
    return Achievement(
        achievement_id=UUID(row["achievement_id"]),
        achievement_type=AchievementType(row["achievement_type"]),
        earned_at=datetime.fromisoformat(row["earned_at"]),
        metadata=row["metadata"],
    )
