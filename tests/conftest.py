# File: tests/conftest.py
from __future__ import annotations

from typing import Dict, List, Mapping, Optional

import pytest

from site_kb.config import CrawlerConfig
from site_kb.crawler.fetcher import FetchedDocument
from site_kb.crawler.models import CrawledPage, CrawlOptions
from site_kb.errors import FetchError
from site_kb.utils import normalize_url


class FakeFetcher:
    """
    In-memory stand-in for HtmlFetcher.

    ``pages`` maps URL -> body; ``failures`` maps URL -> reason and makes the
    fetch raise FetchError. Unknown URLs fail with "HTTP 404". Lookups are done
    on the normalized URL so tests may spell URLs freely.
    """

    def __init__(
        self,
        pages: Mapping[str, str],
        failures: Optional[Mapping[str, str]] = None,
        redirects: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.pages: Dict[str, str] = {normalize_url(u): body for u, body in pages.items()}
        self.failures: Dict[str, str] = {normalize_url(u): r for u, r in (failures or {}).items()}
        self.redirects: Dict[str, str] = {normalize_url(u): t for u, t in (redirects or {}).items()}
        self.requested: List[str] = []

    async def fetch_document(self, url: str) -> FetchedDocument:
        self.requested.append(url)
        key = normalize_url(url)
        final_url = self.redirects.get(key, url)
        key = normalize_url(final_url)
        if key in self.failures:
            raise FetchError(url, self.failures[key])
        if key not in self.pages:
            raise FetchError(url, "HTTP 404")
        return FetchedDocument(url=url, final_url=final_url, text=self.pages[key])

    async def fetch(self, url: str) -> str:
        return (await self.fetch_document(url)).text


def html_page(body: str, title: str = "") -> str:
    head = f"<head><title>{title}</title></head>" if title else ""
    return f"<html>{head}<body>{body}</body></html>"


def links(*hrefs: str) -> str:
    return html_page("".join(f'<a href="{href}">Link {href}</a>' for href in hrefs))


@pytest.fixture()
def basic_config() -> CrawlerConfig:
    """
    Return a basic valid CrawlerConfig for crawler tests.
    """
    return CrawlerConfig(
        max_depth=2,
        max_pages=25,
        timeout=2.0,
        user_agent="TestAgent/1.0",
        concurrency=1,
    )


@pytest.fixture()
def options() -> CrawlOptions:
    return CrawlOptions(max_depth=2, max_pages=25)


@pytest.fixture()
def mock_page() -> CrawledPage:
    """
    Provide a simple CrawledPage instance with HTML content.
    """
    html = '<html><body><a href="/link1">L1</a><a href="http://external.com">X</a></body></html>'
    return CrawledPage(url="http://example.com/", depth=0, html=html)
