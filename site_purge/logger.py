# === FILE: site_purge/logger.py ===
"""Logging setup for **SitePurge**.

One project logger named ``SitePurge``; modules log through children such as
``SitePurge.crawler`` or ``SitePurge.purger``::

    from site_purge.logger import get_logger
    log = get_logger("crawler")
    log.info("Found %s", url)

The CLI calls :func:`configure` again with the user's level, file and format.
cssutils reports every unknown property or selector hack through its own
logger; that channel is kept at CRITICAL whatever level the project uses.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

import cssutils

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "SitePurge"
LOG_FILE_MAX_BYTES: Final[int] = 5 * 1024 * 1024
LOG_FILE_BACKUPS: Final[int] = 3

_LevelT = Union[int, str]


def _handlers(log_file: str | Path | None, fmt: str) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(
                filename=str(log_file),
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )
    formatter = logging.Formatter(fmt)
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def quiet_cssutils() -> None:
    """Silence cssutils parser chatter (unknown properties, IE hacks...)."""
    cssutils.log.setLevel(logging.CRITICAL)


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """(Re)configure the ``SitePurge`` logger.

    Parameters
    ----------
    level
        Numeric or textual logging level (e.g. ``"DEBUG"``).
    log_file
        Optional rotating logfile in addition to stdout.
    log_format
        Format string for :class:`logging.Formatter`.
    replace_handlers
        Drop handlers installed by an earlier call first.
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)

    if replace_handlers:
        for handler in list(lg.handlers):
            lg.removeHandler(handler)
            handler.close()

    for handler in _handlers(log_file, log_format):
        lg.addHandler(handler)

    # records stop at the project logger, the root logger stays untouched
    lg.propagate = False
    quiet_cssutils()
    return lg


def get_logger(name: str | None = None) -> logging.Logger:
    """Child of the project logger, e.g. ``get_logger("crawler")`` → ``SitePurge.crawler``."""
    return logging.getLogger(LOGGER_NAME if not name else f"{LOGGER_NAME}.{name}")


logger: logging.Logger = configure()

__all__ = ["logger", "configure", "get_logger", "quiet_cssutils", "DEFAULT_FORMAT", "LOGGER_NAME"]
