"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``SITE_ROTATION_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The CLI and every caller of the engine receive an ``AppConfig`` instance.
The engine itself never reads configuration: callers pass
``minimum_rest_days`` and the time zone explicitly on every call, so the
recommendation and scoring paths can never drift apart.
"""

from __future__ import annotations

import os
import tomllib
from datetime import tzinfo
from pathlib import Path
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

from site_rotation.models.site import RotationConfig

# ── Sub-config models ─────────────────────────────────────────────────────────


class DatabaseConfig(BaseModel):
    """SQLite event store connection settings."""

    model_config = ConfigDict(frozen=True)

    db_path: str = "data/db/site_rotation.db"
    wal_mode: bool = True
    busy_timeout_ms: int = 5000


class RotationSettings(BaseModel):
    """Rotation policy.  Earlier releases defaulted to a 3-day rest."""

    model_config = ConfigDict(frozen=True)

    minimum_rest_days: int = 18

    @field_validator("minimum_rest_days")
    @classmethod
    def validate_rest_days(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"minimum_rest_days must be >= 1, got {v}.")
        return v


class CalendarConfig(BaseModel):
    """Local calendar used for day boundaries and week buckets."""

    model_config = ConfigDict(frozen=True)

    timezone: Optional[str] = None     # None → naive timestamps are already local
    week_start: int = 0                # 0 = Monday (ISO) … 6 = Sunday

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "":
            return None
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown time zone '{v}'.") from exc
        return v

    @field_validator("week_start")
    @classmethod
    def validate_week_start(cls, v: int) -> int:
        if not 0 <= v <= 6:
            raise ValueError(f"week_start must be in 0..6, got {v}.")
        return v

    def zone_info(self) -> Optional[tzinfo]:
        """Return the configured ``ZoneInfo``, or ``None`` for naive local time."""
        return ZoneInfo(self.timezone) if self.timezone else None


class AnalyticsConfig(BaseModel):
    """Defaults for trend and heatmap reporting."""

    model_config = ConfigDict(frozen=True)

    trend_days: int = 7
    trend_group_by: str = "day"

    @field_validator("trend_days")
    @classmethod
    def validate_trend_days(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"trend_days must be >= 1, got {v}.")
        return v

    @field_validator("trend_group_by")
    @classmethod
    def validate_group_by(cls, v: str) -> str:
        if v not in ("day", "week"):
            raise ValueError(f"trend_group_by must be 'day' or 'week', got '{v}'.")
        return v


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/site_rotation.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class ExportConfig(BaseModel):
    """Where report exports are written."""

    model_config = ConfigDict(frozen=True)

    output_dir: str = "data/exports"


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth.

    Constructed by ``load_config()`` which merges TOML + .env + environment.
    """

    model_config = ConfigDict(frozen=True)

    database: DatabaseConfig = DatabaseConfig()
    rotation: RotationSettings = RotationSettings()
    calendar: CalendarConfig = CalendarConfig()
    analytics: AnalyticsConfig = AnalyticsConfig()
    logging: LoggingConfig = LoggingConfig()
    export: ExportConfig = ExportConfig()
    debug: bool = False

    def rotation_config(self) -> RotationConfig:
        """Return the per-call ``RotationConfig`` handed to the engine."""
        return RotationConfig(minimum_rest_days=self.rotation.minimum_rest_days)


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    load_dotenv(dotenv_path=root / ".env", override=False)

    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    raw = _apply_env_overrides(raw)

    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply SITE_ROTATION_* env vars to the raw config dict.

    Supported overrides:
      SITE_ROTATION_DB_PATH        → raw["database"]["db_path"]
      SITE_ROTATION_LOG_LEVEL      → raw["logging"]["level"]
      SITE_ROTATION_MIN_REST_DAYS  → raw["rotation"]["minimum_rest_days"]
      SITE_ROTATION_TIMEZONE       → raw["calendar"]["timezone"]
      SITE_ROTATION_DEBUG          → raw["debug"]
    """
    if db_path := os.environ.get("SITE_ROTATION_DB_PATH"):
        raw.setdefault("database", {})["db_path"] = db_path

    if log_level := os.environ.get("SITE_ROTATION_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if rest_days := os.environ.get("SITE_ROTATION_MIN_REST_DAYS"):
        raw.setdefault("rotation", {})["minimum_rest_days"] = int(rest_days)

    if tz_name := os.environ.get("SITE_ROTATION_TIMEZONE"):
        raw.setdefault("calendar", {})["timezone"] = tz_name

    if debug := os.environ.get("SITE_ROTATION_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        database=DatabaseConfig(**raw.get("database", {})),
        rotation=RotationSettings(**raw.get("rotation", {})),
        calendar=CalendarConfig(**raw.get("calendar", {})),
        analytics=AnalyticsConfig(**raw.get("analytics", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        export=ExportConfig(**raw.get("export", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
