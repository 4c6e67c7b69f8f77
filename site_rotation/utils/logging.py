"""
Logging setup for the site-rotation CLI.

Call ``configure_logging(config)`` once at CLI entry.  Library modules only
use ``logging.getLogger(__name__)``; the engine emits DEBUG records and the
event store emits INFO records for every write.

Store writes attach the record they touched through ``extra=``, using the
keys in ``CONTEXT_FIELDS``::

    logger.info("Placement recorded", extra={"event_id": ..., "site_key": ...})

Plain lines append the context as ``key=value`` pairs; JSON lines
(``json_format = true`` under ``[logging]``) carry it as top-level fields::

    {"ts": "2026-03-01T08:30:00+00:00", "level": "INFO",
     "logger": "site_rotation.db.repositories.placement_repo",
     "msg": "Placement recorded", "event_id": "...", "site_key": "builtin:left_arm"}
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from site_rotation.config import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

CONTEXT_FIELDS = ("event_id", "site_key", "custom_id", "achievement_type")


def record_context(record: logging.LogRecord) -> dict[str, str]:
    """Return the store context attached to ``record``, in field order."""
    return {
        key: str(getattr(record, key))
        for key in CONTEXT_FIELDS
        if getattr(record, key, None) is not None
    }


class _ContextFormatter(logging.Formatter):
    """Plain-text lines with ``key=value`` store context appended."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = record_context(record)
        if not context:
            return line
        return line + " " + " ".join(f"{k}={v}" for k, v in context.items())


class _JsonFormatter(logging.Formatter):
    """One JSON object per line: ``ts``, ``level``, ``logger``, ``msg``, context."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(
                timespec="seconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update(record_context(record))
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def build_formatter(json_format: bool) -> logging.Formatter:
    if json_format:
        return _JsonFormatter()
    return _ContextFormatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)


def configure_logging(config: "LoggingConfig") -> None:
    """Configure the root logger from the ``[logging]`` config section.

    Records go to stdout and, when ``config.log_file`` is set, to that file
    (parent directories are created).  Calling it again replaces the
    previous handlers.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)
    formatter = build_formatter(config.json_format)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)
