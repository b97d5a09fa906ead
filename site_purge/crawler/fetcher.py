# site_purge/crawler/fetcher.py
"""
Fetcher module: performs a single HTTP GET and classifies the response.

Transport failures raise :class:`CrawlClientError`, unreadable bodies raise
:class:`CrawlDataError`. No retries are made here.

The body charset comes from the Content-Type header, then from the document
itself (meta tag or XML declaration), then defaults to UTF-8.
"""
from __future__ import annotations

import asyncio
import codecs
from typing import Callable, Optional

from aiohttp import ClientError, ClientPayloadError, ClientSession, ClientTimeout
from bs4.dammit import EncodingDetector

from site_purge.config import PurgeConfig
from site_purge.crawler.models import FetchResult
from site_purge.errors import CrawlClientError, CrawlDataError
from site_purge.logger import get_logger

logger = get_logger("fetcher")


def create_session(config: PurgeConfig) -> ClientSession:
    """Shared aiohttp session with the configured timeout and User-Agent."""
    return ClientSession(
        timeout=ClientTimeout(total=config.timeout),
        headers={"User-Agent": config.user_agent},
        raise_for_status=False,
    )


class Fetcher:
    """Handles one HTTP fetch per call: status, content type and body checks."""

    def __init__(self, session: ClientSession, config: PurgeConfig) -> None:
        self.session = session
        self.config = config

    async def fetch(self, url: str, accept: Callable[[str], bool]) -> FetchResult:
        """
        Fetch *url*. The body is only read when *accept* returns True for the
        response Content-Type and the status is 2xx.
        """
        try:
            async with self.session.get(url, allow_redirects=True) as resp:
                final_url = str(resp.url)
                ctype = resp.headers.get("Content-Type", "")
                if not 200 <= resp.status < 300:
                    if self.config.strict_status:
                        raise CrawlClientError(f"HTTP {resp.status}", url)
                    logger.warning("HTTP %s for %s, skipped", resp.status, url)
                    return FetchResult(final_url, resp.status, ctype)
                if not accept(ctype):
                    logger.debug("Ignoring %s (%s)", url, ctype or "no content type")
                    return FetchResult(final_url, resp.status, ctype)

                limit = self.config.max_resource_size
                if resp.content_length is not None and resp.content_length > limit:
                    raise CrawlDataError(
                        f"resource size {resp.content_length} exceeds limit {limit}", url
                    )
                body = await resp.read()
                if len(body) > limit:
                    raise CrawlDataError(f"resource size {len(body)} exceeds limit {limit}", url)
                encoding = resp.charset or declared_encoding(body) or "utf-8"
        except ClientPayloadError as exc:
            raise CrawlDataError(f"malformed response body: {exc}", url) from exc
        except ClientError as exc:
            raise CrawlClientError(f"request failed: {exc}", url) from exc
        except asyncio.TimeoutError as exc:
            raise CrawlClientError("request timed out", url) from exc

        return FetchResult(final_url, resp.status, ctype, _validated(body, encoding, url), encoding)


def declared_encoding(body: bytes) -> Optional[str]:
    """Charset from <meta charset>, <meta http-equiv> or an XML declaration, if known."""
    encoding = EncodingDetector.find_declared_encoding(body, is_html=True)
    if not encoding:
        return None
    try:
        codecs.lookup(encoding)
    except LookupError:
        logger.debug("Ignoring unknown declared charset %r", encoding)
        return None
    return encoding


def _validated(body: bytes, encoding: str, url: str) -> bytes:
    try:
        codecs.lookup(encoding)
        body.decode(encoding)
    except LookupError as exc:
        raise CrawlDataError(f"unknown charset {encoding!r}", url) from exc
    except UnicodeDecodeError as exc:
        raise CrawlDataError(f"body is not valid {encoding}: {exc.reason}", url) from exc
    return body


__all__ = ["Fetcher", "create_session", "declared_encoding"]
