# site_purge/crawler/link_extractor.py
"""
Link extraction and URL normalization utilities for SitePurge.
"""
from __future__ import annotations

import posixpath
from typing import List
from urllib.parse import parse_qsl, quote, unquote, urlencode, urljoin, urlparse, urlunparse

from bs4 import BeautifulSoup
from bs4.element import Tag

_LINK_ATTRS = (("a", "href"), ("area", "href"), ("iframe", "src"), ("frame", "src"))
_SKIP_SCHEMES = ("mailto:", "javascript:", "tel:", "data:")
_DEFAULT_PORTS = {"http": 80, "https": 443}


def normalize_url(url: str, *, strip_querystring: bool = False) -> str:
    """
    Normalize URL: lowercase scheme and host, drop default port and fragment,
    resolve dot segments and sort query parameters.
    """
    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    host = (parsed.hostname or "").lower()
    if parsed.port and parsed.port != _DEFAULT_PORTS.get(scheme):
        host = f"{host}:{parsed.port}"
    path = unquote(parsed.path or "/")
    norm = posixpath.normpath(path)
    if path.endswith("/") and not norm.endswith("/"):
        norm += "/"
    # normpath keeps a leading "//"
    norm = "/" + norm.lstrip("/")
    norm = quote(norm, safe="/:@!$&'()*+,;=~-._")
    query = ""
    if not strip_querystring:
        qs = parse_qsl(parsed.query, keep_blank_values=True)
        qs.sort()
        query = urlencode(qs, doseq=True)
    return urlunparse((scheme, host, norm, "", query, ""))


def site_key(url: str, *, ignore_www: bool = True) -> str:
    """Host[:port] identifying a site; ``www.`` is folded away when *ignore_www*."""
    parsed = urlparse(url)
    host = (parsed.hostname or "").lower()
    if ignore_www and host.startswith("www."):
        host = host[4:]
    port = parsed.port
    if port and port != _DEFAULT_PORTS.get(parsed.scheme.lower()):
        host = f"{host}:{port}"
    return host


def is_same_site(url: str, seed: str, *, ignore_www: bool = True) -> bool:
    """True for http(s) URLs on the seed's host."""
    if urlparse(url).scheme.lower() not in ("http", "https"):
        return False
    return site_key(url, ignore_www=ignore_www) == site_key(seed, ignore_www=ignore_www)


def extract_links(html: str, page_url: str) -> List[str]:
    """
    Extract absolute HTTP(S) links from *html*, resolved against ``<base href>``
    or *page_url*. Ignores mailto:, javascript:, tel: and data: targets.
    """
    soup = BeautifulSoup(html, "html.parser")
    base_url = page_url
    base_tag = soup.find("base", href=True)
    if isinstance(base_tag, Tag):
        base_href = base_tag.get("href")
        if isinstance(base_href, str) and base_href.strip():
            base_url = urljoin(page_url, base_href.strip())

    links: List[str] = []
    for name, attr in _LINK_ATTRS:
        for tag in soup.find_all(name, attrs={attr: True}):
            if not isinstance(tag, Tag):
                continue
            value = tag.get(attr)
            if not isinstance(value, str):
                continue
            raw = value.strip()
            if not raw or raw.startswith("#") or raw.lower().startswith(_SKIP_SCHEMES):
                continue
            absolute = urljoin(base_url, raw)
            if urlparse(absolute).scheme in ("http", "https"):
                links.append(absolute)
    return links


__all__ = ["extract_links", "normalize_url", "is_same_site", "site_key"]
