# site_purge/crawler/models.py
"""
Data models for the SitePurge crawler.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Tuple, Union

from site_purge.errors import CrawlError

MimeFilter = Callable[[str], bool]


def mime_filter(patterns: Iterable[str]) -> MimeFilter:
    """Build a predicate matching a Content-Type header against *patterns* (anchored at start)."""
    compiled = tuple(re.compile(p, re.IGNORECASE) for p in patterns)

    def _accept(content_type: str) -> bool:
        return any(rx.match(content_type) for rx in compiled)

    return _accept


@dataclass(frozen=True, slots=True)
class CrawlJob:
    """Seed URL plus the content types worth keeping."""

    seed_url: str
    mime_filter: MimeFilter


@dataclass(frozen=True, slots=True)
class FetchResult:
    """A received response. ``body`` is None when it was not downloaded or kept."""

    url: str
    status: int
    content_type: str
    body: Optional[bytes] = None
    encoding: str = "utf-8"


@dataclass(frozen=True, slots=True)
class PageResult:
    """Holds the normalized URL and raw body of a fetched HTML page."""

    url: str
    body: bytes
    content_type: str = "text/html"
    encoding: str = "utf-8"

    @property
    def text(self) -> str:
        return self.body.decode(self.encoding)


@dataclass(frozen=True, slots=True)
class Completed:
    pages: Tuple[PageResult, ...]

    @property
    def urls(self) -> set[str]:
        return {page.url for page in self.pages}


@dataclass(frozen=True, slots=True)
class Failed:
    cause: CrawlError


CrawlOutcome = Union[Completed, Failed]
