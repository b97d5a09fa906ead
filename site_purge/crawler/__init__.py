# site_purge/crawler/__init__.py
"""Asynchronous same-site crawler that collects HTML pages for purging."""
from site_purge.crawler.crawler import AsyncCrawler, CrawlState
from site_purge.crawler.fetcher import Fetcher
from site_purge.crawler.models import Completed, CrawlJob, CrawlOutcome, Failed, FetchResult, PageResult

__all__ = [
    "AsyncCrawler",
    "CrawlState",
    "Fetcher",
    "CrawlJob",
    "CrawlOutcome",
    "Completed",
    "Failed",
    "FetchResult",
    "PageResult",
]
