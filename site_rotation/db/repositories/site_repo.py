"""
Repository for the site catalog — custom sites and disabled built-ins.

``load_catalog()`` is the single read the engine's callers need: it resolves
the stored state into the canonical ordered catalog via ``build_catalog()``.

Disabling is guarded: switching off the last enabled site (built-in or
custom) raises ``InvalidConfigurationError`` and leaves the store unchanged,
so a catalog read back from the database always has an active site.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from site_rotation.db.repositories.base import BaseRepository
from site_rotation.models.site import BuiltinSiteRef, CustomSite, Site
from site_rotation.sites.catalog import InvalidConfigurationError, build_catalog
from site_rotation.taxonomy.site_taxonomy import BodyLocation
from site_rotation.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


class SiteRepository(BaseRepository):
    """Read/write access to ``custom_sites`` and ``disabled_builtin_sites``."""

    # ── Custom sites ──────────────────────────────────────────────────────────

    def add_custom_site(
        self,
        name: str,
        icon_name: str = "star.fill",
        created_at: Optional[datetime] = None,
        custom_id: Optional[UUID] = None,
    ) -> CustomSite:
        """Create and persist a custom site.

        Raises:
            pydantic.ValidationError: If ``name`` is blank.
        """
        site = CustomSite(
            custom_id=custom_id or uuid4(),
            name=name,
            icon_name=icon_name,
            created_at=created_at or utcnow(),
        )
        self.execute(
            """
            INSERT INTO custom_sites (custom_id, name, icon_name, is_enabled, created_at)
            VALUES (?, ?, ?, ?, ?);
            """,
            (
                str(site.custom_id),
                site.name,
                site.icon_name,
                int(site.is_enabled),
                site.created_at.isoformat(),
            ),
        )
        logger.info(
            "Added custom site '%s'", site.name, extra={"custom_id": str(site.custom_id)}
        )
        return site

    def get_custom_site(self, custom_id: UUID) -> Optional[CustomSite]:
        row = self.fetchone(
            "SELECT * FROM custom_sites WHERE custom_id = ?;", (str(custom_id),)
        )
        return _row_to_custom_site(row) if row else None

    def list_custom_sites(self) -> list[CustomSite]:
        rows = self.fetchall("SELECT * FROM custom_sites ORDER BY created_at, name;")
        return [_row_to_custom_site(r) for r in rows]

    def rename_custom_site(self, custom_id: UUID, name: str) -> None:
        name = name.strip()
        if not name:
            raise ValueError("Custom site name must not be blank.")
        self.execute_one(
            "UPDATE custom_sites SET name = ? WHERE custom_id = ?;",
            (name, str(custom_id)),
            what=f"Custom site {custom_id}",
        )
        logger.info("Renamed custom site to '%s'", name, extra={"custom_id": str(custom_id)})

    def set_custom_site_enabled(self, custom_id: UUID, enabled: bool) -> None:
        """Enable or disable a custom site.

        Raises:
            LookupError: If the custom site does not exist.
            InvalidConfigurationError: If disabling would leave no enabled site.
        """
        site = self.get_custom_site(custom_id)
        if site is None:
            raise LookupError(f"Custom site {custom_id} not found.")
        if not enabled and site.is_enabled:
            self._guard_last_enabled()
        self.execute(
            "UPDATE custom_sites SET is_enabled = ? WHERE custom_id = ?;",
            (int(enabled), str(custom_id)),
        )

    def delete_custom_site(self, custom_id: UUID) -> None:
        """Delete a custom site; its placements stay in history.

        Raises:
            LookupError: If the custom site does not exist.
            InvalidConfigurationError: If it is the last enabled site.
        """
        site = self.get_custom_site(custom_id)
        if site is None:
            raise LookupError(f"Custom site {custom_id} not found.")
        if site.is_enabled:
            self._guard_last_enabled()
        self.execute("DELETE FROM custom_sites WHERE custom_id = ?;", (str(custom_id),))
        logger.info("Deleted custom site '%s'", site.name, extra={"custom_id": str(custom_id)})

    # ── Built-in sites ────────────────────────────────────────────────────────

    def disabled_locations(self) -> list[BodyLocation]:
        rows = self.fetchall("SELECT location FROM disabled_builtin_sites;")
        return [BodyLocation(r["location"]) for r in rows]

    def disable_builtin(self, location: BodyLocation) -> None:
        """Switch a built-in location off.  Idempotent.

        Raises:
            InvalidConfigurationError: If it is the last enabled site.
        """
        if location in self.disabled_locations():
            return
        self._guard_last_enabled()
        self.execute(
            "INSERT INTO disabled_builtin_sites (location) VALUES (?);",
            (location.value,),
        )
        logger.info(
            "Disabled built-in site",
            extra={"site_key": BuiltinSiteRef(location=location).key},
        )

    def enable_builtin(self, location: BodyLocation) -> None:
        """Switch a built-in location back on.  Idempotent."""
        self.execute(
            "DELETE FROM disabled_builtin_sites WHERE location = ?;",
            (location.value,),
        )

    # ── Catalog ───────────────────────────────────────────────────────────────

    def load_catalog(self) -> list[Site]:
        """Resolve the stored state into the canonical ordered catalog."""
        return build_catalog(self.list_custom_sites(), self.disabled_locations())

    def enabled_count(self) -> int:
        return sum(site.enabled for site in self.load_catalog())

    def _guard_last_enabled(self) -> None:
        if self.enabled_count() <= 1:
            raise InvalidConfigurationError(
                "Cannot disable the last enabled site; at least one must stay active."
            )


def _row_to_custom_site(row) -> CustomSite:
    """Convert a ``sqlite3.Row`` to a ``CustomSite`` model."""
    return CustomSite(
        custom_id=UUID(row["custom_id"]),
        name=row["name"],
        icon_name=row["icon_name"],
        is_enabled=bool(row["is_enabled"]),
        created_at=datetime.fromisoformat(row["created_at"]),
    )
