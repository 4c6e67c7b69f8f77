"""
Earned achievement record.

Created by the gamification collaborator (``AchievementRepository.award``)
the first time an achievement's progress reaches 1.0.  The engine only
reports progress; it never creates these records itself.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from site_rotation.taxonomy.achievement_taxonomy import AchievementType


class Achievement(BaseModel):
    """An achievement the user has earned.

    Attributes:
        achievement_id: Unique identity of this award.
        achievement_type: Which milestone was reached.
        earned_at: When the milestone was first reached.
        metadata: Optional context (e.g. the streak length when earned).
    """

    model_config = ConfigDict(frozen=True)

    achievement_id: UUID = Field(default_factory=uuid4)
    achievement_type: AchievementType
    earned_at: datetime
    metadata: Optional[str] = None

    @property
    def points(self) -> int:
        return self.achievement_type.points
