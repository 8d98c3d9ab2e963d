# === FILE: site_kb/crawler/crawler.py ===
"""Breadth-first, same-host link crawler."""
from __future__ import annotations

import asyncio
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional, Set, Tuple

from site_kb.crawler.fetcher import FetchedDocument, HtmlFetcher
from site_kb.crawler.link_extractor import extract_links
from site_kb.crawler.models import CrawledPage, CrawlError, CrawlOptions, CrawlResult, QueueItem
from site_kb.errors import FetchError
from site_kb.logger import get_logger
from site_kb.utils import host_of, normalize_url, same_host

__all__ = ("LinkCrawler",)

_Outcome = Tuple[QueueItem, Optional[FetchedDocument], Optional[FetchError]]


@dataclass(slots=True)
class _CrawlState:
    """Traversal state owned by exactly one :meth:`LinkCrawler.crawl` call."""

    origin_host: str
    queue: Deque[QueueItem]
    visited: Set[str] = field(default_factory=set)
    pages: List[CrawledPage] = field(default_factory=list)
    errors: List[CrawlError] = field(default_factory=list)


class LinkCrawler:
    """BFS over in-page links, bounded by depth and page budget.

    Fetches may run concurrently (``concurrency`` > 1), but the queue and the
    visited set are only touched by the crawl loop itself and results are
    applied in dequeue order, so the outcome equals a sequential crawl.
    """

    def __init__(self, fetcher: HtmlFetcher, options: CrawlOptions, *, concurrency: int = 1) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.fetcher = fetcher
        self.options = options
        self.concurrency = concurrency
        self.logger = get_logger("crawler")

    async def crawl(self, start_url: str) -> CrawlResult:
        """Crawl from *start_url*; raises :class:`~site_kb.errors.ParseError` if it has no host."""
        root = normalize_url(start_url)
        state = _CrawlState(origin_host=host_of(root), queue=deque([QueueItem(root, 0)]))
        self.logger.info(
            "Link crawl: %s (max_depth=%d, max_pages=%d)",
            root, self.options.max_depth, self.options.max_pages,
        )
        started = time.monotonic()

        while state.queue and len(state.pages) < self.options.max_pages:
            batch = self._next_batch(state)
            if not batch:
                continue
            for item, document, error in await self._fetch_batch(batch):
                self._apply(state, item, document, error)

        self.logger.info(
            "Link crawl finished: %d pages, %d errors in %.2f s",
            len(state.pages), len(state.errors), time.monotonic() - started,
        )
        return CrawlResult(pages=state.pages, errors=state.errors)

    def _next_batch(self, state: _CrawlState) -> List[QueueItem]:
        room = min(self.concurrency, self.options.max_pages - len(state.pages))
        batch: List[QueueItem] = []
        while state.queue and len(batch) < room:
            item = state.queue.popleft()
            if item.url in state.visited:
                continue
            state.visited.add(item.url)
            if item.depth > self.options.max_depth:
                continue
            batch.append(item)
        return batch

    async def _fetch_batch(self, batch: List[QueueItem]) -> List[_Outcome]:
        if len(batch) == 1:
            return [await self._fetch_one(batch[0])]
        return list(await asyncio.gather(*(self._fetch_one(item) for item in batch)))

    async def _fetch_one(self, item: QueueItem) -> _Outcome:
        try:
            return item, await self.fetcher.fetch_document(item.url), None
        except FetchError as exc:
            return item, None, exc

    def _apply(
        self,
        state: _CrawlState,
        item: QueueItem,
        document: Optional[FetchedDocument],
        error: Optional[FetchError],
    ) -> None:
        if document is None:
            self.logger.warning("Failed %s: %s", item.url, error)
            state.errors.append(CrawlError(url=item.url, message=str(error)))
            return

        state.pages.append(CrawledPage(url=item.url, depth=item.depth, html=document.text))
        if item.depth >= self.options.max_depth:
            return
        for link in extract_links(document.text, document.final_url):
            if not same_host(link, state.origin_host):
                continue
            normalized = normalize_url(link)
            if normalized not in state.visited:
                state.queue.append(QueueItem(normalized, item.depth + 1))
