# File: site_kb/engine.py
"""site_kb.engine: Orchestration layer: crawl, extract, aggregate, assemble."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import List, Optional

from site_kb.aggregator import aggregate_extractions
from site_kb.config import CrawlerConfig
from site_kb.crawler.crawler import LinkCrawler
from site_kb.crawler.fetcher import HtmlFetcher
from site_kb.crawler.merger import merge_crawl_results
from site_kb.crawler.models import CrawlError, CrawlOptions, CrawlResult
from site_kb.crawler.sitemap import SitemapDiscoverer
from site_kb.extractor.page import extract_pages
from site_kb.knowledge_base import KnowledgeBase, build_knowledge_base
from site_kb.logger import logger
from site_kb.utils import origin_of

__all__ = ["BuildResult", "Engine"]


@dataclass(slots=True)
class BuildResult:
    """Knowledge base of one crawl request plus the per-URL errors met on the way."""

    knowledge_base: KnowledgeBase
    errors: List[CrawlError] = field(default_factory=list)
    pages_crawled: int = 0


class Engine:
    """Фасад для CLI и тестов: запуск обоих способов обхода, извлечение и сборка базы знаний."""

    def __init__(self, config: Optional[CrawlerConfig] = None, fetcher: Optional[HtmlFetcher] = None) -> None:
        """*fetcher* is optional; without it each call opens and closes its own HTTP session."""
        self.config = config or CrawlerConfig()
        self.fetcher = fetcher

    async def crawl(
        self,
        start_url: str,
        *,
        max_depth: Optional[int] = None,
        max_pages: Optional[int] = None,
    ) -> CrawlResult:
        """Sitemap discovery and link crawling run concurrently, then merge."""
        origin_of(start_url)  # malformed start URL -> ParseError before any request
        options = self.config.options(max_depth=max_depth, max_pages=max_pages)

        if self.fetcher is not None:
            return await self._crawl_with(self.fetcher, start_url, options)
        async with HtmlFetcher(self.config) as fetcher:
            return await self._crawl_with(fetcher, start_url, options)

    async def _crawl_with(
        self, fetcher: HtmlFetcher, start_url: str, options: CrawlOptions
    ) -> CrawlResult:
        sitemap = SitemapDiscoverer(
            fetcher,
            options,
            max_nesting=self.config.sitemap_max_nesting,
            concurrency=self.config.concurrency,
        )
        links = LinkCrawler(fetcher, options, concurrency=self.config.concurrency)
        sitemap_result, link_result = await asyncio.gather(
            sitemap.crawl(start_url), links.crawl(start_url)
        )
        return merge_crawl_results(sitemap_result, link_result, options.max_pages)

    async def build(
        self,
        start_url: str,
        *,
        max_depth: Optional[int] = None,
        max_pages: Optional[int] = None,
    ) -> BuildResult:
        """Crawl *start_url* and turn the pages into a :class:`KnowledgeBase`.

        An empty page list is not an error here; deciding what to do with it is
        up to the caller.
        """
        started = time.monotonic()
        logger.info("Building knowledge base for %s", start_url)
        crawl = await self.crawl(start_url, max_depth=max_depth, max_pages=max_pages)
        extraction = aggregate_extractions(extract_pages(crawl.pages))
        knowledge_base = build_knowledge_base(start_url, extraction)
        logger.info(
            "Knowledge base ready: %d pages, %d errors, %.2f s",
            len(crawl.pages), len(crawl.errors), time.monotonic() - started,
        )
        return BuildResult(knowledge_base=knowledge_base, errors=crawl.errors, pages_crawled=len(crawl.pages))

    def run(
        self,
        start_url: str,
        *,
        max_depth: Optional[int] = None,
        max_pages: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> BuildResult:
        """Синхронная обёртка над :meth:`build` с необязательным общим таймаутом."""
        coro = self.build(start_url, max_depth=max_depth, max_pages=max_pages)
        try:
            if timeout:
                return asyncio.run(asyncio.wait_for(coro, timeout=timeout))
            return asyncio.run(coro)
        except asyncio.TimeoutError:
            logger.error("Crawl did not finish within %s seconds", timeout)
            raise
        except Exception as exc:
            logger.error("Crawl failed: %s", exc)
            raise
