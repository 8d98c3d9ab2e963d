# site_kb/crawler/merger.py
"""Merging of the sitemap and link-crawl discovery results."""
from __future__ import annotations

from typing import Dict

from site_kb.crawler.models import CrawledPage, CrawlResult
from site_kb.logger import get_logger
from site_kb.utils import normalize_url

log = get_logger("merger")


def merge_crawl_results(sitemap: CrawlResult, links: CrawlResult, max_pages: int) -> CrawlResult:
    """Sitemap pages first, then link-crawl pages; first URL wins, capped at *max_pages*.

    Errors of both strategies are concatenated as they are: the same URL failing
    in both is reported twice.
    """
    by_url: Dict[str, CrawledPage] = {}
    for page in [*sitemap.pages, *links.pages]:
        by_url.setdefault(normalize_url(page.url), page)

    pages = list(by_url.values())[:max_pages]
    log.debug(
        "Merged %d sitemap + %d link pages into %d",
        len(sitemap.pages), len(links.pages), len(pages),
    )
    return CrawlResult(pages=pages, errors=[*sitemap.errors, *links.errors])


__all__ = ["merge_crawl_results"]
