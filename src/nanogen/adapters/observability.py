"""Process-wide logging for nanogen runs.

CLI flags win over ``NANOGEN_*`` environment variables, which win over the
defaults below. Records go to stderr and to a size-rotated file.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_HTTP_LOG_LEVEL = "WARNING"
DEFAULT_LOG_PATH = "work/logs/nanogen.log"
DEFAULT_LOG_MAX_BYTES = 5 * 1024 * 1024
DEFAULT_LOG_BACKUP_COUNT = 10

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

_active_settings: LoggingSettings | None = None


def _level_from(raw: str | None, fallback: int) -> int:
    name = (raw or "").strip().upper()
    level = logging.getLevelName(name) if name else fallback
    return level if isinstance(level, int) else fallback


def _bounded_int(raw: str | None, default: int, *, minimum: int, maximum: int) -> int:
    try:
        value = int((raw or "").strip())
    except ValueError:
        return default
    return max(minimum, min(maximum, value))


@dataclass(frozen=True)
class LoggingSettings:
    level: int
    log_path: Path
    max_bytes: int
    backup_count: int
    http_level: int

    @classmethod
    def resolve(cls, *, level: str | None = None, log_path: str | None = None) -> LoggingSettings:
        """Merge explicit overrides with the environment; blank overrides are ignored."""
        env = os.environ
        default_level = _level_from(DEFAULT_LOG_LEVEL, logging.INFO)
        path_text = (log_path or "").strip() or env.get("NANOGEN_LOG_PATH", "").strip()
        return cls(
            level=_level_from(level or env.get("NANOGEN_LOG_LEVEL"), default_level),
            log_path=Path(path_text or DEFAULT_LOG_PATH),
            max_bytes=_bounded_int(
                env.get("NANOGEN_LOG_MAX_BYTES"),
                DEFAULT_LOG_MAX_BYTES,
                minimum=64 * 1024,
                maximum=100 * 1024 * 1024,
            ),
            backup_count=_bounded_int(
                env.get("NANOGEN_LOG_BACKUP_COUNT"),
                DEFAULT_LOG_BACKUP_COUNT,
                minimum=1,
                maximum=120,
            ),
            http_level=_level_from(env.get("NANOGEN_HTTP_LOG_LEVEL"), logging.WARNING),
        )


def _handlers(settings: LoggingSettings) -> list[logging.Handler]:
    settings.log_path.parent.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    console = logging.StreamHandler()
    rotating = RotatingFileHandler(
        filename=settings.log_path,
        maxBytes=settings.max_bytes,
        backupCount=settings.backup_count,
        encoding="utf-8",
    )
    for handler in (console, rotating):
        handler.setFormatter(formatter)
    return [console, rotating]


def configure_runtime_logging(
    *, level: str | None = None, log_path: str | None = None
) -> LoggingSettings:
    """Install the nanogen handlers on the root logger, once per process.

    Later calls return the settings of the first call unchanged.
    """
    global _active_settings
    if _active_settings is not None:
        return _active_settings

    settings = LoggingSettings.resolve(level=level, log_path=log_path)
    root = logging.getLogger()
    root.setLevel(settings.level)
    root.handlers.clear()
    for handler in _handlers(settings):
        root.addHandler(handler)
    # One line per crawl request is noise at INFO.
    logging.getLogger("httpx").setLevel(settings.http_level)

    _active_settings = settings
    return settings
