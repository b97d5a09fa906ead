# site_purge/errors.py
"""Exception hierarchy for SitePurge."""
from __future__ import annotations

from typing import Optional


class SitePurgeError(Exception):
    """Base exception for SitePurge."""


class ConfigurationError(SitePurgeError):
    """Raised when the pipeline is missing a required input."""


class CrawlError(SitePurgeError):
    """Base class for failures that terminate a crawl."""

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.url = url

    def __str__(self) -> str:
        message = super().__str__()
        return f"{message} ({self.url})" if self.url else message


class CrawlClientError(CrawlError):
    """Transport or protocol failure: refused connection, timeout, fatal status."""


class CrawlDataError(CrawlError):
    """A response was received but its body could not be interpreted."""


class PurgeEngineError(SitePurgeError):
    """The stylesheet or the corpus was rejected by the purger."""


class OutputWriteError(SitePurgeError):
    """The purged stylesheet could not be written."""


__all__ = [
    "SitePurgeError",
    "ConfigurationError",
    "CrawlError",
    "CrawlClientError",
    "CrawlDataError",
    "PurgeEngineError",
    "OutputWriteError",
]
