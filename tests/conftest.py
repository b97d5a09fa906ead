# File: tests/conftest.py
import asyncio
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

import pytest

from site_purge.config import PurgeConfig
from site_purge.crawler.models import FetchResult, MimeFilter

SEED = "http://example.com/"

Entry = Union[Tuple[str, str], Exception]


class FakeFetcher:
    """In-memory site: url -> (content type, body) or an exception to raise."""

    def __init__(self, pages: Dict[str, Entry], delays: Optional[Dict[str, float]] = None) -> None:
        self.pages = pages
        self.delays = delays or {}
        self.calls: List[str] = []
        self.bodies_read: List[str] = []

    async def fetch(self, url: str, accept: MimeFilter) -> FetchResult:
        self.calls.append(url)
        await asyncio.sleep(self.delays.get(url, 0))
        entry = self.pages.get(url)
        if entry is None:
            return FetchResult(url, 404, "text/html")
        if isinstance(entry, Exception):
            raise entry
        ctype, body = entry
        if not accept(ctype):
            return FetchResult(url, 200, ctype)
        self.bodies_read.append(url)
        return FetchResult(url, 200, ctype, body.encode("utf-8"))


@pytest.fixture()
def make_fetcher() -> Callable[..., FakeFetcher]:
    return FakeFetcher


@pytest.fixture()
def stylesheet(tmp_path: Path) -> Path:
    """
    Stylesheet with one used, one unused and one whitelisted selector.
    """
    path = tmp_path / "style.css"
    path.write_text(
        ".used { color: red }\n"
        ".unused { color: blue }\n"
        ".menu-toggle { color: green }\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture()
def basic_config(stylesheet: Path) -> PurgeConfig:
    """
    Return a basic valid PurgeConfig with a fast rate limit for tests.
    """
    return PurgeConfig(
        url=SEED,
        stylesheet=stylesheet,
        concurrency=3,
        rate_limit=1000.0,
        timeout=2.0,
        user_agent="TestAgent/1.0",
    )


@pytest.fixture()
def two_page_site() -> Dict[str, Entry]:
    """Page A (seed) links to page B, B has no links."""
    return {
        SEED: ("text/html; charset=utf-8", '<html><body><div class="used"><a href="/b">B</a></div></body></html>'),
        "http://example.com/b": ("text/html", "<html><body><p>B</p></body></html>"),
    }
