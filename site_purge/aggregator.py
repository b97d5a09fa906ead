# File: site_purge/aggregator.py
"""site_purge.aggregator: сборка корпуса HTML-страниц для очистки CSS."""

from __future__ import annotations

from typing import List

from site_purge.crawler.models import CrawlOutcome, Failed
from site_purge.purge.models import ContentEntry


def aggregate_content(outcome: CrawlOutcome) -> List[ContentEntry]:
    """Тела страниц в порядке их получения; для Failed пробрасывает причину."""
    if isinstance(outcome, Failed):
        raise outcome.cause
    return [ContentEntry(raw=page.text, extension="html") for page in outcome.pages]


__all__ = ["aggregate_content"]
