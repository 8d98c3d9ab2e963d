# site_kb/crawler/sitemap.py
"""
Sitemap-based discovery: finds the site's XML sitemap at its canonical
locations, walks sitemap indexes recursively and fetches the listed pages.

A missing sitemap is a normal outcome and yields an empty
:class:`~site_kb.crawler.models.CrawlResult`.
"""
from __future__ import annotations

import asyncio
from typing import List, Optional, Sequence, Set, Tuple
from urllib.parse import urljoin, urlsplit

from lxml import etree

from site_kb.crawler.fetcher import HtmlFetcher
from site_kb.crawler.models import CrawledPage, CrawlError, CrawlOptions, CrawlResult
from site_kb.errors import FetchError, ParseError
from site_kb.logger import get_logger
from site_kb.parser.sitemap_parser import parse_sitemap
from site_kb.utils import (
    is_likely_file,
    is_too_deep,
    normalize_url,
    origin_of,
    path_depth,
    remove_duplicates,
    same_host,
)

SITEMAP_CANDIDATES: Sequence[str] = ("/sitemap.xml", "/sitemap_index.xml", "/sitemap-index.xml")
DEFAULT_MAX_NESTING = 5

log = get_logger("sitemap")


class SitemapDiscoverer:
    """Discovers and fetches pages listed in the site's sitemap(s)."""

    def __init__(
        self,
        fetcher: HtmlFetcher,
        options: CrawlOptions,
        *,
        max_nesting: int = DEFAULT_MAX_NESTING,
        concurrency: int = 1,
    ) -> None:
        self.fetcher = fetcher
        self.options = options
        self.max_nesting = max_nesting
        self.concurrency = max(1, concurrency)

    async def crawl(self, start_url: str) -> CrawlResult:
        """Discover sitemap URLs for *start_url* and fetch them in sitemap order."""
        origin = origin_of(start_url)
        try:
            urls = await self.discover_urls(origin)
        except ParseError:
            raise
        except (FetchError, etree.Error, ValueError) as exc:
            log.warning("Sitemap discovery failed for %s: %s", origin, exc)
            return CrawlResult()
        if not urls:
            log.info("No usable sitemap for %s", origin)
            return CrawlResult()

        log.info("Sitemap lists %d pages for %s", len(urls), origin)
        result = CrawlResult()
        for url, html, error in await self._fetch_pages(urls[: self.options.max_pages]):
            if html is not None:
                result.pages.append(CrawledPage(url=url, depth=path_depth(url), html=html))
            else:
                log.warning("Failed %s: %s", url, error)
                result.errors.append(CrawlError(url=url, message=str(error)))
        return result

    async def discover_urls(self, start_url: str) -> List[str]:
        """Return candidate page URLs from the first sitemap location that yields any."""
        origin = origin_of(start_url)
        visited: Set[str] = set()
        for candidate in SITEMAP_CANDIDATES:
            sitemap_url = f"{origin}{candidate}"
            try:
                xml = await self.fetcher.fetch(sitemap_url)
            except FetchError as exc:
                log.debug("No sitemap at %s: %s", sitemap_url, exc.reason)
                continue
            urls = await self._parse_recursive(xml, origin, visited, level=0)
            if urls:
                return remove_duplicates(urls)[: self.options.max_pages]
        return []

    async def _parse_recursive(
        self, xml: str, origin: str, visited: Set[str], *, level: int
    ) -> List[str]:
        urls: List[str] = []
        for raw_loc in parse_sitemap(xml):
            if len(urls) >= self.options.max_pages:
                break
            try:
                location = urljoin(f"{origin}/", raw_loc)
                is_xml = urlsplit(location).path.lower().endswith(".xml")
            except ValueError:
                continue
            if not same_host(location, origin):
                continue
            normalized = normalize_url(location)
            if normalized in visited:
                continue
            visited.add(normalized)

            if is_xml:
                urls.extend(
                    (await self._parse_child(normalized, origin, visited, level=level + 1))[
                        : self.options.max_pages - len(urls)
                    ]
                )
                continue

            if is_too_deep(normalized, self.options.max_depth) or is_likely_file(normalized):
                continue
            urls.append(normalized)
        return urls

    async def _parse_child(
        self, sitemap_url: str, origin: str, visited: Set[str], *, level: int
    ) -> List[str]:
        if level > self.max_nesting:
            log.debug("Sitemap nesting limit (%d) reached at %s", self.max_nesting, sitemap_url)
            return []
        try:
            child_xml = await self.fetcher.fetch(sitemap_url)
        except FetchError as exc:
            log.debug("Skipping nested sitemap %s: %s", sitemap_url, exc.reason)
            return []
        return await self._parse_recursive(child_xml, origin, visited, level=level)

    async def _fetch_pages(
        self, urls: List[str]
    ) -> List[Tuple[str, Optional[str], Optional[FetchError]]]:
        semaphore = asyncio.Semaphore(self.concurrency)

        async def _one(url: str) -> Tuple[str, Optional[str], Optional[FetchError]]:
            async with semaphore:
                try:
                    return url, await self.fetcher.fetch(url), None
                except FetchError as exc:
                    return url, None, exc

        # gather keeps the input order, which the merge priority relies on
        return list(await asyncio.gather(*(_one(url) for url in urls)))


__all__ = ["SITEMAP_CANDIDATES", "SitemapDiscoverer"]
