"""
Site identity and catalog models.

``SiteRef`` is a tagged union: a placement references either a built-in
``BodyLocation`` or a user-defined custom site by UUID.  The ``kind``
discriminator keeps resolution exhaustive — there is no nullable raw string
to fall back on.  Both variants are frozen, so refs compare and hash
structurally and can key dictionaries directly.

``Site`` is one catalog entry (built-in or custom) with its display name and
enabled flag; ``CustomSite`` is the stored form of a user-defined site.

``RotationConfig`` is the per-call rotation policy handed to the engine.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from site_rotation.taxonomy.site_taxonomy import BodyLocation, SiteKind


class BuiltinSiteRef(BaseModel):
    """Reference to a built-in body location."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["builtin"] = "builtin"
    location: BodyLocation

    @property
    def key(self) -> str:
        """Stable string form, e.g. ``"builtin:left_arm"``."""
        return f"builtin:{self.location.value}"


class CustomSiteRef(BaseModel):
    """Reference to a user-defined custom site."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["custom"] = "custom"
    custom_id: UUID

    @property
    def key(self) -> str:
        """Stable string form, e.g. ``"custom:6f1c…"``."""
        return f"custom:{self.custom_id}"


SiteRef = Annotated[Union[BuiltinSiteRef, CustomSiteRef], Field(discriminator="kind")]


def parse_site_ref(key: str) -> Union[BuiltinSiteRef, CustomSiteRef]:
    """Parse a stable site key back into a ``SiteRef``.

    Accepts ``"builtin:<location>"``, ``"custom:<uuid>"``, and a bare
    ``BodyLocation`` value as shorthand for a built-in site.

    Raises:
        ValueError: If the key is malformed or names an unknown location.
    """
    kind, sep, value = key.partition(":")
    if not sep:
        return BuiltinSiteRef(location=BodyLocation(key))
    if kind == SiteKind.BUILTIN:
        return BuiltinSiteRef(location=BodyLocation(value))
    if kind == SiteKind.CUSTOM:
        return CustomSiteRef(custom_id=UUID(value))
    raise ValueError(f"Unknown site kind '{kind}' in key '{key}'.")


class Site(BaseModel):
    """One entry in the site catalog.

    Attributes:
        ref: Identity of the site.
        display_name: Human-readable name shown to the user.
        enabled: Disabled sites stay in the catalog (history keeps
            referencing them) but are never scored or recommended.
        created_at: Creation time for custom sites; ``None`` for built-ins.
            Orders custom sites within the catalog.
    """

    model_config = ConfigDict(frozen=True)

    ref: SiteRef
    display_name: str
    enabled: bool = True
    created_at: Optional[datetime] = None

    @property
    def kind(self) -> SiteKind:
        return SiteKind(self.ref.kind)

    @property
    def id(self) -> str:
        return self.ref.key

    @classmethod
    def builtin(cls, location: BodyLocation, enabled: bool = True) -> "Site":
        return cls(
            ref=BuiltinSiteRef(location=location),
            display_name=location.display_name,
            enabled=enabled,
        )


class CustomSite(BaseModel):
    """A user-defined placement site as persisted by the event store.

    Attributes:
        custom_id: UUID identity; referenced by ``CustomSiteRef``.
        name: User-chosen display name.
        icon_name: Icon identifier for presentation layers.
        is_enabled: Whether the site participates in rotation.
        created_at: Creation timestamp; orders custom sites in the catalog.
    """

    model_config = ConfigDict(frozen=True)

    custom_id: UUID
    name: str
    icon_name: str = "star.fill"
    is_enabled: bool = True
    created_at: datetime

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Custom site name must not be blank.")
        return v

    @property
    def ref(self) -> CustomSiteRef:
        return CustomSiteRef(custom_id=self.custom_id)

    def to_site(self) -> Site:
        return Site(
            ref=self.ref,
            display_name=self.name,
            enabled=self.is_enabled,
            created_at=self.created_at,
        )


class RotationConfig(BaseModel):
    """Rotation policy for one engine call.

    Scalar per call; may differ between user profiles.
    """

    model_config = ConfigDict(frozen=True)

    minimum_rest_days: int

    @field_validator("minimum_rest_days")
    @classmethod
    def validate_rest_days(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"minimum_rest_days must be >= 1, got {v}.")
        return v
