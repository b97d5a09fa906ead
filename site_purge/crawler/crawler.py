# === FILE: site_purge/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import enum
import time
from typing import List, Optional, Protocol, Set, Tuple

from aiohttp import ClientSession

from site_purge.config import PurgeConfig
from site_purge.crawler.fetcher import Fetcher, create_session
from site_purge.crawler.link_extractor import extract_links, is_same_site, normalize_url
from site_purge.crawler.models import (
    Completed,
    CrawlJob,
    CrawlOutcome,
    Failed,
    FetchResult,
    MimeFilter,
    PageResult,
)
from site_purge.errors import CrawlError
from site_purge.logger import get_logger

__all__ = ("AsyncCrawler", "CrawlState", "FetcherLike")


class FetcherLike(Protocol):
    async def fetch(self, url: str, accept: MimeFilter) -> FetchResult: ...


class CrawlState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class AsyncCrawler:
    """
    Breadth-first same-site crawler with bounded concurrency.

    A crawler runs exactly once and yields a single :data:`CrawlOutcome`:
    ``Completed`` with every reachable page matching the job's mime filter, or
    ``Failed`` with the first fetch error. After a failure no new request is
    issued and queued work is dropped.
    """

    def __init__(
        self,
        job: CrawlJob,
        config: PurgeConfig,
        fetcher: Optional[FetcherLike] = None,
    ) -> None:
        self.job = job
        self.config = config
        self.fetcher = fetcher
        self.state = CrawlState.IDLE
        self.logger = get_logger("crawler")
        self.seen: Set[str] = set()
        self.recorded: Set[str] = set()
        self._session: Optional[ClientSession] = None
        self._failure: Optional[CrawlError] = None
        self._crash: Optional[BaseException] = None
        self._failed = asyncio.Event()
        self._rate_lock = asyncio.Lock()
        self._last_request_ts = 0.0

    async def __aenter__(self) -> AsyncCrawler:
        if self.fetcher is None:
            self._session = create_session(self.config)
            self.fetcher = Fetcher(self._session, self.config)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def crawl(self) -> CrawlOutcome:
        if self.fetcher is None:
            raise RuntimeError("Fetcher not initialized, use 'async with AsyncCrawler(...)'")
        if self.state is not CrawlState.IDLE:
            raise RuntimeError(f"crawl already {self.state.value}")
        self.state = CrawlState.RUNNING
        self.logger.info("Crawling %s", self.job.seed_url)
        start = time.monotonic()

        queue: asyncio.Queue[Tuple[str, int]] = asyncio.Queue()
        root = self._normalize(self.job.seed_url)
        self.seen.add(root)
        queue.put_nowait((root, 0))
        results: List[PageResult] = []

        workers = [asyncio.create_task(self._worker(queue, results)) for _ in range(self.config.concurrency)]
        drained = asyncio.create_task(queue.join())
        failed = asyncio.create_task(self._failed.wait())
        try:
            await asyncio.wait({drained, failed}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (*workers, drained, failed):
                task.cancel()
            await asyncio.gather(*workers, drained, failed, return_exceptions=True)

        duration = time.monotonic() - start
        if self._crash is not None:
            self.state = CrawlState.FAILED
            raise self._crash
        if self._failure is not None:
            self.state = CrawlState.FAILED
            self.logger.error("Crawl failed after %.2f s: %s", duration, self._failure)
            return Failed(self._failure)

        self.state = CrawlState.COMPLETED
        self.logger.info("Crawl complete: %d pages in %.2f s", len(results), duration)
        return Completed(tuple(results))

    async def _worker(self, queue: asyncio.Queue[Tuple[str, int]], results: List[PageResult]) -> None:
        while True:
            url, depth = await queue.get()
            try:
                if not self._failed.is_set():
                    await self._visit(url, depth, queue, results)
            except CrawlError as exc:
                self._fail(exc)
            except Exception as exc:
                self.logger.exception("Unexpected error while visiting %s", url)
                if self._crash is None:
                    self._crash = exc
                self._failed.set()
            finally:
                queue.task_done()

    async def _visit(
        self,
        url: str,
        depth: int,
        queue: asyncio.Queue[Tuple[str, int]],
        results: List[PageResult],
    ) -> None:
        if self._page_limit_reached(results):
            return
        await self._wait_for_rate_limit()
        if self._failed.is_set():
            return

        assert self.fetcher is not None
        result = await self.fetcher.fetch(url, self.job.mime_filter)
        if result.body is None or self._failed.is_set():
            return

        final = self._normalize(result.url)
        if final != url:
            if not self._in_site(final):
                self.logger.debug("Redirect off site %s -> %s, skipped", url, result.url)
                return
            self.seen.add(final)
        if final in self.recorded or self._page_limit_reached(results):
            return
        self.recorded.add(final)
        page = PageResult(final, result.body, result.content_type, result.encoding)
        results.append(page)
        self.logger.info("Found %s", final)

        if self.config.max_depth and depth >= self.config.max_depth:
            return
        for link in extract_links(page.text, final):
            norm = self._normalize(link)
            if norm not in self.seen and self._in_site(norm):
                self.seen.add(norm)
                queue.put_nowait((norm, depth + 1))

    def _fail(self, exc: CrawlError) -> None:
        if self._failure is None:
            self._failure = exc
            self._failed.set()

    def _page_limit_reached(self, results: List[PageResult]) -> bool:
        return self.config.max_pages is not None and len(results) >= self.config.max_pages

    def _in_site(self, url: str) -> bool:
        return is_same_site(url, self.job.seed_url, ignore_www=self.config.ignore_www_domain)

    def _normalize(self, url: str) -> str:
        return normalize_url(url, strip_querystring=self.config.strip_querystring)

    async def _wait_for_rate_limit(self) -> None:
        interval = 1 / self.config.rate_limit
        async with self._rate_lock:
            now = time.monotonic()
            wait = interval - (now - self._last_request_ts)
            if wait > 0:
                await asyncio.sleep(wait)
            self._last_request_ts = time.monotonic()
