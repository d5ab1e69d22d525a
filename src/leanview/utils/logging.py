"""Session transcript logging for the infoview engine.

Every module logs under the ``leanview`` namespace. :func:`configure_logging`
attaches a rotating transcript file (and optionally stderr) to that namespace
only, so a host application's root logger is left untouched. Calling it again
replaces the handlers installed by the previous call.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

from ..services.settings import Settings

__all__ = ["configure_logging", "reset_logging", "get_log_path"]

NAMESPACE = "leanview"
LOG_FILE_NAME = "leanview.log"
_DEFAULT_LOG_DIR = Path.home() / ".leanview" / "logs"
_QUIET_LOGGERS: tuple[str, ...] = ("asyncio",)
_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)-7s %(name)s: %(message)s"

_installed: list[logging.Handler] = []
_log_path: Path | None = None


def configure_logging(
    settings: Settings | None = None,
    *,
    level: int | None = None,
    log_dir: Path | str | None = None,
    console: bool = False,
    max_bytes: int = 512_000,
    backup_count: int = 2,
) -> Path:
    """Send ``leanview`` records to ``<log_dir>/leanview.log`` and return that path.

    Without an explicit ``level`` the transcript records DEBUG when
    ``settings.debug_logging`` is set and INFO otherwise. The directory
    defaults to ``$LEANVIEW_LOG_DIR`` or ``~/.leanview/logs``.
    """

    global _log_path
    if level is None:
        level = logging.DEBUG if settings is not None and settings.debug_logging else logging.INFO

    directory = Path(log_dir or os.environ.get("LEANVIEW_LOG_DIR") or _DEFAULT_LOG_DIR).expanduser()
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / LOG_FILE_NAME

    reset_logging()
    formatter = logging.Formatter(_FORMAT, datefmt="%H:%M:%S")
    handlers: list[logging.Handler] = [
        logging.handlers.RotatingFileHandler(
            path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())

    logger = logging.getLogger(NAMESPACE)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
        logger.addHandler(handler)
        _installed.append(handler)
    logger.setLevel(level)

    # asyncio reports slow callbacks at DEBUG, which buries transition records
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    _log_path = path
    logger.debug("Transcript logging to %s at %s", path, logging.getLevelName(level))
    return path


def reset_logging() -> None:
    """Detach and close the handlers installed by :func:`configure_logging`."""

    global _log_path
    logger = logging.getLogger(NAMESPACE)
    while _installed:
        handler = _installed.pop()
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    _log_path = None


def get_log_path() -> Path | None:
    """Return the transcript file currently written to, if any."""

    return _log_path
