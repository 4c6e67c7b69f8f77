"""
Placement event model — the only input history the engine reasons over.

A ``PlacementEvent`` records that the pump was placed at a site at a point in
time.  Records are immutable snapshots: editing a placement produces a new
``PlacementEvent`` with the same ``event_id`` (see ``edited()``), and the
event store replaces its row.  The engine never mutates events.

``placed_at`` may be naive (already in the user's local time) or aware.
Every engine call takes an optional ``tz``; aware timestamps are converted
into it before calendar days are compared.  Mixing naive and aware
timestamps in one call is a caller error.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from site_rotation.models.site import BuiltinSiteRef, SiteRef
from site_rotation.taxonomy.site_taxonomy import BodyLocation


class PlacementEvent(BaseModel):
    """A single logged pump placement.

    Attributes:
        event_id: Stable identity; survives edits.
        site_ref: Built-in or custom site the pump was placed at.
        placed_at: When the placement happened.
        note: Optional free-form note (e.g. "Site felt tender").
        profile_id: Owning user profile, when multiple profiles exist.
    """

    model_config = ConfigDict(frozen=True)

    event_id: UUID = Field(default_factory=uuid4)
    site_ref: SiteRef
    placed_at: datetime
    note: Optional[str] = None
    profile_id: Optional[UUID] = None

    @field_validator("note")
    @classmethod
    def normalize_note(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @classmethod
    def at_location(
        cls,
        location: BodyLocation,
        placed_at: datetime,
        note: Optional[str] = None,
    ) -> "PlacementEvent":
        """Shorthand for a placement at a built-in location."""
        return cls(
            site_ref=BuiltinSiteRef(location=location),
            placed_at=placed_at,
            note=note,
        )

    def edited(
        self,
        site_ref: Optional[SiteRef] = None,
        placed_at: Optional[datetime] = None,
        note: Optional[str] = None,
    ) -> "PlacementEvent":
        """Return the effective record after an edit.

        Fields left as ``None`` keep their current value; pass ``note=""`` to clear
        the note.  ``event_id`` and ``profile_id`` never change.
        """
        return PlacementEvent(
            event_id=self.event_id,
            site_ref=site_ref if site_ref is not None else self.site_ref,
            placed_at=placed_at if placed_at is not None else self.placed_at,
            note=note if note is not None else self.note,
            profile_id=self.profile_id,
        )
