"""Logging configuration for the aliaszip CLI."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from rich.console import Console
from rich.logging import RichHandler

from aliaszip.config.models import LoggingSettings

PACKAGE_LOGGER = "aliaszip"
_HANDLER_MARKER = "_aliaszip_handler"


def _level_for(settings: LoggingSettings, verbosity: int) -> int:
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    level = logging.getLevelName(settings.level.upper())
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(
    settings: LoggingSettings,
    *,
    verbosity: int = 0,
    console: Console | None = None,
) -> logging.Logger:
    """Attach handlers to the package logger, replacing any set up previously.

    Args:
        settings: Logging section of the configuration.
        verbosity: Number of `-v` flags; 1 selects INFO and 2 or more DEBUG.
        console: Console used by the rich handler; stderr when omitted.

    Returns:
        logging.Logger: The configured package logger.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            logger.removeHandler(handler)
            handler.close()

    level = _level_for(settings, verbosity)
    logger.setLevel(level)

    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        show_time=False,
        markup=False,
    )
    rich_handler.setLevel(level)
    setattr(rich_handler, _HANDLER_MARKER, True)
    logger.addHandler(rich_handler)

    if settings.file is not None:
        log_path = settings.file.expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=max(settings.max_size_mb, 1) * 1024 * 1024,
            backupCount=settings.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(
            logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s")
        )
        file_handler.setLevel(level)
        setattr(file_handler, _HANDLER_MARKER, True)
        logger.addHandler(file_handler)

    return logger


__all__ = ["configure_logging", "PACKAGE_LOGGER"]
