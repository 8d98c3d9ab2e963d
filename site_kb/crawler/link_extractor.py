# site_kb/crawler/link_extractor.py
"""
Link extraction for the breadth-first crawler.
"""
from __future__ import annotations

from typing import List
from urllib.parse import urljoin, urlsplit, urlunsplit

from bs4 import BeautifulSoup
from bs4.element import Tag

from site_kb.utils import is_likely_file

_SKIPPED_PREFIXES = ("#", "mailto:", "tel:", "javascript:", "data:")


def _document_base(soup: BeautifulSoup, page_url: str) -> str:
    base = soup.find("base", href=True)
    if isinstance(base, Tag):
        href = base.get("href")
        if isinstance(href, str) and href.strip():
            return urljoin(page_url, href.strip())
    return page_url


def extract_links(html: str, page_url: str) -> List[str]:
    """
    Extract navigable HTTP(S) links from *html* in document order.

    Skips fragments, mailto:, tel:, javascript: and likely binary files.
    Returned URLs are absolute, without fragment and unique. Host filtering is
    left to the caller, which knows the crawl's start host. Malformed hrefs are
    dropped silently.
    """
    soup = BeautifulSoup(html, "html.parser")
    base_url = _document_base(soup, page_url)
    links: List[str] = []
    seen: set[str] = set()
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        raw = href_val.strip()
        if not raw or raw.lower().startswith(_SKIPPED_PREFIXES):
            continue
        try:
            parts = urlsplit(urljoin(base_url, raw))
        except ValueError:
            continue
        if parts.scheme not in ("http", "https") or not parts.netloc:
            continue
        absolute = urlunsplit((parts.scheme, parts.netloc, parts.path, parts.query, ""))
        if is_likely_file(absolute) or absolute in seen:
            continue
        seen.add(absolute)
        links.append(absolute)
    return links


__all__ = ["extract_links"]
