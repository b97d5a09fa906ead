# site_purge/purge/models.py
"""
Data models passed to and returned by the purger.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from site_purge.purge.whitelist import Whitelist


@dataclass(frozen=True, slots=True)
class ContentEntry:
    """One corpus document: raw markup and its kind."""

    raw: str
    extension: str = "html"


@dataclass(frozen=True, slots=True)
class PurgeRequest:
    stylesheet_path: Path
    content: Tuple[ContentEntry, ...]
    whitelist: Whitelist


@dataclass(frozen=True, slots=True)
class PurgeResult:
    css: str
    selectors_kept: int = 0
    selectors_removed: int = 0
