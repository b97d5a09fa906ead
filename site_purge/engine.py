# File: site_purge/engine.py
"""site_purge.engine: оркестрация запуска: обход сайта, очистка CSS, запись результата."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, Optional, Protocol, Union

from site_purge.aggregator import aggregate_content
from site_purge.config import PurgeConfig
from site_purge.crawler.crawler import AsyncCrawler, FetcherLike
from site_purge.crawler.models import CrawlJob, CrawlOutcome, Failed, mime_filter
from site_purge.errors import CrawlClientError, CrawlError, OutputWriteError, PurgeEngineError
from site_purge.logger import logger
from site_purge.purge.models import PurgeRequest, PurgeResult
from site_purge.purge.purger import CssPurger
from site_purge.purge.whitelist import build_whitelist
from site_purge.report import PipelineReport
from site_purge.writer import derive_output_path, write_stylesheet

__all__ = ["Engine"]

Writer = Callable[[Union[str, Path], str], Path]


class Purger(Protocol):
    def purge(self, request: PurgeRequest) -> PurgeResult: ...


class Engine:
    """Фасад для CLI и тестов: один проход обход → очистка → запись."""

    def __init__(
        self,
        config: PurgeConfig,
        *,
        fetcher: Optional[FetcherLike] = None,
        purger: Optional[Purger] = None,
        writer: Writer = write_stylesheet,
    ) -> None:
        self.config = config
        self.fetcher = fetcher
        self.purger = purger if purger is not None else CssPurger()
        self.writer = writer

    def build_job(self) -> CrawlJob:
        url, _ = self.config.require_inputs()
        return CrawlJob(seed_url=url, mime_filter=mime_filter(self.config.mime_types))

    async def crawl(self) -> CrawlOutcome:
        """Обходит сайт; общий таймаут обхода превращается в Failed(CrawlClientError)."""
        job = self.build_job()
        async with AsyncCrawler(job, self.config, self.fetcher) as crawler:
            if self.config.crawl_timeout is None:
                return await crawler.crawl()
            try:
                return await asyncio.wait_for(crawler.crawl(), timeout=self.config.crawl_timeout)
            except asyncio.TimeoutError:
                return Failed(
                    CrawlClientError(
                        f"crawl did not finish within {self.config.crawl_timeout} seconds", job.seed_url
                    )
                )

    def run(self) -> PipelineReport:
        """Выполняет конвейер ровно один раз; первая ошибка прерывает все последующие шаги."""
        url, stylesheet = self.config.require_inputs()
        output = self.config.output or derive_output_path(stylesheet)

        outcome = asyncio.run(self.crawl())
        try:
            content = aggregate_content(outcome)
        except CrawlError as exc:
            logger.error("Crawling failed: %s", exc)
            raise

        request = PurgeRequest(
            stylesheet_path=Path(stylesheet),
            content=tuple(content),
            whitelist=build_whitelist(self.config),
        )
        logger.info("Purging %s", stylesheet)
        try:
            result = self.purger.purge(request)
        except PurgeEngineError as exc:
            logger.error("Purging failed: %s", exc)
            raise

        logger.info("Writing %s", output)
        try:
            written = self.writer(output, result.css)
        except OutputWriteError as exc:
            logger.error("Writing failed: %s", exc)
            raise

        return PipelineReport(
            seed_url=url,
            stylesheet=str(stylesheet),
            output=str(written),
            pages=[page.url for page in outcome.pages],
            selectors_kept=result.selectors_kept,
            selectors_removed=result.selectors_removed,
        )
