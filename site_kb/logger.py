# === FILE: site_kb/logger.py ===
"""Logging setup for **site_kb**.

All modules log through the ``SiteKB`` logger or one of its children
(``SiteKB.crawler``, ``SiteKB.sitemap``, ...)::

    from site_kb.logger import get_logger
    log = get_logger("crawler")
    log.info("Link crawl: %s", url)

Records go to stderr, because stdout belongs to the JSON knowledge base the
CLI prints. A rotating log file can be added with :func:`init_logging`.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, List, Union

_DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_LOGGER_NAME: Final[str] = "SiteKB"
_MAX_LOG_BYTES: Final[int] = 5 * 1024 * 1024
_LOG_BACKUPS: Final[int] = 3

Level = Union[int, str]


def _handlers(log_file: str | Path | None, fmt: str) -> List[logging.Handler]:
    formatter = logging.Formatter(fmt)
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(
                str(log_file), maxBytes=_MAX_LOG_BYTES, backupCount=_LOG_BACKUPS, encoding="utf-8"
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure(
    *,
    level: Level = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """Set level and handlers of the ``SiteKB`` logger and return it.

    With ``replace_handlers=False`` the new handlers are added next to the
    existing ones. The logger never propagates to the root logger.
    """
    project = logging.getLogger(_LOGGER_NAME)
    project.setLevel(level)
    if replace_handlers:
        for old in list(project.handlers):
            project.removeHandler(old)
            old.close()
    for handler in _handlers(log_file, log_format):
        project.addHandler(handler)
    project.propagate = False
    return project


def init_logging(
    level: Level = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
) -> logging.Logger:
    """Used once per CLI invocation."""
    return configure(level=level, log_file=log_file, log_format=log_format)


def get_logger(name: str | None = None) -> logging.Logger:
    """``SiteKB`` itself, or ``SiteKB.<name>``."""
    return logging.getLogger(f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME)


# warnings only until the CLI (or the caller) configures something else
logger: logging.Logger = init_logging(level="WARNING")

__all__ = ["logger", "configure", "init_logging", "get_logger"]
